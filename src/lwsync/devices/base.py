"""Interfaces shared by the device synchronization layer."""

from abc import ABC, abstractmethod
from typing import Any, Union

from lwsync.devices.descriptor import DeviceDescriptor


class BridgeGateway(ABC):
    """Abstract base class for the Lightwave bridge connection.

    The synchronization engine only talks to the bridge through this
    interface, so the transport (HTTP, cloud session, local file) can be
    swapped without touching device logic.
    """

    @abstractmethod
    async def wait_for_bridge_ready(self) -> bool:
        """Suspend until the bridge connection is usable.

        Returns:
            True once the bridge is ready, False if it never will be
        """
        pass

    @abstractmethod
    async def get_feature_value(self, feature_id: str) -> Union[int, float]:
        """Read the raw value of a feature.

        Returns:
            The bridge-native value. Negative values mean unknown/error.
        """
        pass

    @abstractmethod
    async def set_feature_value(self, feature_id: str, value: Union[str, int, float]) -> None:
        """Write a raw value to a feature."""
        pass

    @abstractmethod
    async def register_webhook(self, feature_id: str, scope: str, webhook_key: str) -> None:
        """Ask the bridge to push value changes of a feature.

        Args:
            feature_id: Feature to watch
            scope: Webhook scope, always "feature" for device features
            webhook_key: Key the bridge echoes back on every delivery
        """
        pass

    @abstractmethod
    async def get_devices_of_type(self, kind: str) -> list[DeviceDescriptor]:
        """Return descriptors for every paired-capable device of the given type."""
        pass


class CapabilitySink(ABC):
    """Where normalized capability values and availability are published."""

    @abstractmethod
    async def set_capability_value(self, name: str, value: Any) -> None:
        pass

    @abstractmethod
    async def set_available(self) -> None:
        pass

    @abstractmethod
    async def set_unavailable(self, reason: str) -> None:
        pass
