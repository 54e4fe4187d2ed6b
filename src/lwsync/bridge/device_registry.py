"""Device registry for the sync engines of all paired devices."""

import logging
from typing import Optional

from lwsync.devices.sync_engine import DeviceSyncEngine

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Registry for managing device sync engines by ID.

    IDs are ``{driverKind}_{externalId}``, the same prefix the bridge uses in
    webhook keys, so inbound webhooks can be routed with a single lookup.
    """

    def __init__(self):
        self._devices: dict[str, DeviceSyncEngine] = {}

    def register(self, device_id: str, engine: DeviceSyncEngine) -> None:
        """Register a device engine with the given ID.

        Args:
            device_id: Unique identifier for the device
            engine: Sync engine owning the device's state

        Raises:
            ValueError: If a device with the same ID is already registered
        """
        if device_id in self._devices:
            raise ValueError(f"Device already registered: {device_id}")
        self._devices[device_id] = engine

    def unregister(self, device_id: str) -> Optional[DeviceSyncEngine]:
        """Unregister a device by ID and tear its engine down.

        Args:
            device_id: ID of device to unregister

        Returns:
            The unregistered engine, or None if not found
        """
        engine = self._devices.pop(device_id, None)
        if engine is not None:
            engine.teardown()
        return engine

    def get(self, device_id: str) -> Optional[DeviceSyncEngine]:
        return self._devices.get(device_id)

    def get_all(self) -> dict[str, DeviceSyncEngine]:
        """Get all registered engines.

        Returns:
            Copy of the mapping from device IDs to engines
        """
        return dict(self._devices)

    def list_device_ids(self) -> list[str]:
        return list(self._devices.keys())

    def clear(self) -> None:
        """Tear down and remove every registered device."""
        for device_id in self.list_device_ids():
            self.unregister(device_id)
        logger.debug("Device registry cleared")

    def __len__(self) -> int:
        """Return the number of registered devices."""
        return len(self._devices)

    def __contains__(self, device_id: str) -> bool:
        """Check if a device ID is registered."""
        return device_id in self._devices
