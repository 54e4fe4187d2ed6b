"""Wires the bridge, drivers and device engines together."""

import logging
from typing import Optional

from lwsync.bridge.config import SyncConfig
from lwsync.bridge.device_registry import DeviceRegistry
from lwsync.bridge.driver import InitSlots, LightwaveDriver
from lwsync.bridge.webhook_router import WebhookRouter
from lwsync.devices.base import BridgeGateway
from lwsync.devices.capability_store import CapabilityStore
from lwsync.devices.descriptor import DeviceKind
from lwsync.devices.sync_engine import DeviceSyncEngine

logger = logging.getLogger(__name__)


class SyncService:
    """Runs every paired device of a bridge.

    Handles:
    - One driver per device kind, sharing start-up slots
    - Adding every pairable device with its own capability store
    - Routing webhook deliveries to the device engines
    - Tearing all engines down on stop
    """

    def __init__(self, bridge: BridgeGateway, config: SyncConfig, history_logger=None):
        """Initialize the service.

        Args:
            bridge: Bridge connection shared by all devices
            config: Timing settings for the engines
            history_logger: Optional capability history logger for every store
        """
        self._bridge = bridge
        self._config = config
        self._history_logger = history_logger
        self.registry = DeviceRegistry()
        self.router = WebhookRouter(self.registry)
        self.stores: dict[str, CapabilityStore] = {}
        slots = InitSlots()
        self.drivers = {
            kind: LightwaveDriver(kind, bridge, self.registry, config, slots)
            for kind in DeviceKind
        }
        self._running = False

    async def start(self) -> bool:
        """Wait for the bridge and add every pairable device.

        Returns:
            True if the bridge was ready and devices were added
        """
        for kind, driver in self.drivers.items():
            if not await driver.on_init():
                logger.error("Bridge not ready, cannot start devices")
                return False

            try:
                descriptors = await driver.list_pairable_devices()
            except Exception as e:
                logger.error(f"Failed to list {kind.value} devices: {e}")
                return False

            for descriptor in descriptors:
                if descriptor.device_id in self.registry:
                    continue
                store = CapabilityStore(descriptor.device_id, self._history_logger)
                self.stores[descriptor.device_id] = store
                await driver.add_device(descriptor, store)

        self._running = True
        logger.info(f"Sync service running with devices: {self.registry.list_device_ids()}")
        return True

    async def stop(self) -> None:
        self._running = False
        self.registry.clear()
        self.stores.clear()
        logger.info("Sync service stopped")

    def get_engine(self, device_id: str) -> Optional[DeviceSyncEngine]:
        return self.registry.get(device_id)

    @property
    def is_running(self) -> bool:
        return self._running
