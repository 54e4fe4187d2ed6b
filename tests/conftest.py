"""Shared fixtures for device sync tests."""

from unittest.mock import AsyncMock

import pytest

from lwsync.devices import (
    BridgeGateway,
    CapabilityStore,
    DeviceDescriptor,
    DeviceKind,
    MockBridge,
)


def _make_bridge(values=None):
    """Build an AsyncMock bridge serving feature values from a dict.

    A value that is an exception instance is raised instead of returned.
    Unknown features return the -1 sentinel.
    """
    values = {} if values is None else values
    bridge = AsyncMock(spec=BridgeGateway)
    bridge.wait_for_bridge_ready.return_value = True

    async def get_feature_value(feature_id):
        value = values.get(feature_id, -1)
        if isinstance(value, Exception):
            raise value
        return value

    bridge.get_feature_value.side_effect = get_feature_value
    bridge.values = values
    return bridge


@pytest.fixture
def make_bridge():
    """Factory for AsyncMock bridges backed by a dict of feature values."""
    return _make_bridge


@pytest.fixture
def dimmer():
    """A dimmer without power or energy features."""
    return DeviceDescriptor(
        kind=DeviceKind.DIMMER,
        external_id="42",
        switch="S1",
        dim_level="D1",
        name="Hall dimmer",
    )


@pytest.fixture
def metered_dimmer():
    """A dimmer that also reports power and energy."""
    return DeviceDescriptor(
        kind=DeviceKind.DIMMER,
        external_id="43",
        switch="S2",
        dim_level="D2",
        power="P2",
        energy="E2",
    )


@pytest.fixture
def socket():
    """A socket with power and energy metering."""
    return DeviceDescriptor(
        kind=DeviceKind.SOCKET,
        external_id="7",
        switch="S7",
        power="P7",
        energy="E7",
        name="Kettle",
    )


@pytest.fixture
def sink():
    return CapabilityStore("test-device")


@pytest.fixture
def tmp_state_file(tmp_path):
    """Provide a temporary bridge state file that doesn't touch ~/.lwsync/."""
    return tmp_path / "bridge_state.json"


@pytest.fixture
def mock_bridge(tmp_state_file):
    """Return a MockBridge backed by a temporary state file."""
    return MockBridge(state_file=tmp_state_file)
