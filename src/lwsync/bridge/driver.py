"""Per-kind driver: pairing lists and device engine creation."""

import itertools
import logging
from typing import Optional

from lwsync.bridge.config import SyncConfig
from lwsync.bridge.device_registry import DeviceRegistry
from lwsync.devices.base import BridgeGateway, CapabilitySink
from lwsync.devices.descriptor import DRIVER_IDS, DeviceDescriptor, DeviceKind
from lwsync.devices.sync_engine import DeviceSyncEngine

logger = logging.getLogger(__name__)


class InitSlots:
    """Hands out increasing start-up slots so devices bootstrap one after another.

    Share one instance between drivers to stagger every device on the bridge.
    """

    def __init__(self):
        self._counter = itertools.count(1)

    def next(self) -> int:
        return next(self._counter)


class LightwaveDriver:
    """Driver for one device kind.

    Lists pairable devices straight from the bridge and creates a sync
    engine per added device. Device creation waits until the bridge is ready.
    """

    def __init__(
        self,
        kind: DeviceKind,
        bridge: BridgeGateway,
        registry: DeviceRegistry,
        config: SyncConfig,
        slots: Optional[InitSlots] = None,
    ):
        self.kind = DeviceKind(kind)
        self._bridge = bridge
        self._registry = registry
        self._config = config
        self._slots = slots or InitSlots()
        self._ready = False

    @property
    def driver_id(self) -> str:
        return DRIVER_IDS[self.kind]

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def on_init(self) -> bool:
        """Wait for the bridge to become ready.

        Returns:
            True if the bridge reported ready
        """
        try:
            self._ready = bool(await self._bridge.wait_for_bridge_ready())
        except Exception as e:
            logger.error(f"{self.driver_id} driver init error: {e}")
            self._ready = False
        return self._ready

    async def list_pairable_devices(self) -> list[DeviceDescriptor]:
        """Devices of this kind known to the bridge."""
        return await self._bridge.get_devices_of_type(self.kind.value)

    async def add_device(self, descriptor: DeviceDescriptor, sink: CapabilitySink) -> DeviceSyncEngine:
        """Create, register and start the sync engine for a device.

        Args:
            descriptor: Device to add, must be of this driver's kind
            sink: Receives the device's capability values

        Returns:
            The started engine

        Raises:
            ValueError: On a kind mismatch or an already registered device
        """
        if descriptor.kind != self.kind:
            raise ValueError(f"{self.driver_id} cannot add a {descriptor.kind.value} device")

        if not self._ready:
            await self.on_init()

        slot = self._slots.next()
        engine = DeviceSyncEngine(
            descriptor,
            self._bridge,
            sink,
            init_delay=slot * self._config.init_delay_for(self.kind),
            retry_interval=self._config.retry_interval,
        )
        self._registry.register(descriptor.device_id, engine)
        await engine.on_ready()

        logger.info(f"Device added: {descriptor.device_id} (slot {slot})")
        return engine

    def remove_device(self, device_id: str) -> bool:
        """Unregister a device and cancel its pending work."""
        engine = self._registry.unregister(device_id)
        if engine is None:
            logger.warning(f"Cannot remove unknown device: {device_id}")
            return False
        logger.info(f"Device removed: {device_id}")
        return True
