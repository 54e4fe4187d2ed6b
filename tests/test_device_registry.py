"""Tests for DeviceRegistry."""

import pytest

from lwsync.bridge.device_registry import DeviceRegistry
from lwsync.devices import Availability, DeviceSyncEngine


@pytest.fixture
def registry():
    """Create an empty device registry."""
    return DeviceRegistry()


@pytest.fixture
def dimmer_engine(dimmer, make_bridge, sink):
    return DeviceSyncEngine(dimmer, make_bridge(), sink)


@pytest.fixture
def socket_engine(socket, make_bridge, sink):
    return DeviceSyncEngine(socket, make_bridge(), sink)


class TestDeviceRegistryBasics:
    """Tests for basic registry operations."""

    def test_empty_registry(self, registry):
        assert len(registry) == 0
        assert registry.list_device_ids() == []

    def test_register_device(self, registry, dimmer_engine):
        registry.register("lwdimmer_42", dimmer_engine)

        assert len(registry) == 1
        assert "lwdimmer_42" in registry
        assert registry.get("lwdimmer_42") is dimmer_engine

    def test_register_duplicate_raises(self, registry, dimmer_engine, socket_engine):
        registry.register("dev-1", dimmer_engine)

        with pytest.raises(ValueError) as exc_info:
            registry.register("dev-1", socket_engine)

        assert "already registered" in str(exc_info.value).lower()

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("unknown-device") is None

    def test_get_all_returns_copy(self, registry, dimmer_engine):
        registry.register("lwdimmer_42", dimmer_engine)

        devices = registry.get_all()
        devices["other"] = dimmer_engine

        assert "other" not in registry

    def test_list_device_ids(self, registry, dimmer_engine, socket_engine):
        registry.register("lwdimmer_42", dimmer_engine)
        registry.register("lwsockets_7", socket_engine)

        assert set(registry.list_device_ids()) == {"lwdimmer_42", "lwsockets_7"}


class TestDeviceUnregister:
    """Tests for device unregistration."""

    @pytest.mark.asyncio
    async def test_unregister_tears_engine_down(self, registry, dimmer_engine):
        registry.register("lwdimmer_42", dimmer_engine)
        dimmer_engine.schedule_bootstrap(60.0)
        timer = dimmer_engine.timer

        removed = registry.unregister("lwdimmer_42")

        assert removed is dimmer_engine
        assert "lwdimmer_42" not in registry
        assert timer.cancelled()
        assert dimmer_engine.state.availability == Availability.UNAVAILABLE

    def test_unregister_unknown_returns_none(self, registry):
        assert registry.unregister("unknown-device") is None

    def test_unregister_allows_reregister(self, registry, dimmer_engine, socket_engine):
        registry.register("dev-1", dimmer_engine)
        registry.unregister("dev-1")

        registry.register("dev-1", socket_engine)

        assert registry.get("dev-1") is socket_engine

    @pytest.mark.asyncio
    async def test_clear_tears_everything_down(self, registry, dimmer_engine, socket_engine):
        registry.register("lwdimmer_42", dimmer_engine)
        registry.register("lwsockets_7", socket_engine)
        socket_engine.schedule_bootstrap(60.0)

        registry.clear()

        assert len(registry) == 0
        assert not socket_engine.retry_pending
