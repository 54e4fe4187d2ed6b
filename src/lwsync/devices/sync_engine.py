"""Per-device synchronization between the bridge and local capability state."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from lwsync.devices import translator
from lwsync.devices.base import BridgeGateway, CapabilitySink
from lwsync.devices.descriptor import WEBHOOK_SCOPE, DeviceDescriptor, FeatureRole

logger = logging.getLogger(__name__)

# Backoff between failed bootstrap attempts, in seconds
DEFAULT_RETRY_INTERVAL = 60.0

_STATE_FIELDS = {
    FeatureRole.SWITCH: "on_off",
    FeatureRole.DIM_LEVEL: "dim_fraction",
    FeatureRole.POWER: "power_watts",
    FeatureRole.ENERGY: "energy_kwh",
}


class Availability(str, Enum):
    INITIALIZING = "initializing"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass
class DeviceState:
    """Normalized cache of a device's bridge values. None means unknown."""

    on_off: Optional[bool] = None
    dim_fraction: Optional[float] = None
    power_watts: Optional[float] = None
    energy_kwh: Optional[float] = None
    availability: Availability = Availability.INITIALIZING
    init_retry_count: int = 0


@dataclass
class BridgeResult:
    """Outcome of a single bridge call."""

    success: bool
    value: Any = None
    error: Optional[Exception] = None


class DeviceSyncEngine:
    """Keeps one device's capability state consistent with the bridge.

    Handles:
    - Delayed bootstrap (read values, read energy, register webhooks) with
      fixed-interval retries until it fully succeeds
    - Outbound switch/dim commands
    - Inbound webhook values
    - On-demand re-reads of device and energy values

    Bridge failures never propagate out of this class; they are logged and
    turned into boolean results. Once a device has become available it stays
    available, later failures only leave its values stale.
    """

    def __init__(
        self,
        descriptor: DeviceDescriptor,
        bridge: BridgeGateway,
        sink: CapabilitySink,
        init_delay: float = 0.0,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
    ):
        """Initialize the engine.

        Args:
            descriptor: Identity and feature ids of the device
            bridge: Connection used for all feature reads and writes
            sink: Receives capability values and availability changes
            init_delay: Seconds to wait before the first bootstrap attempt
            retry_interval: Seconds to wait after a failed bootstrap attempt
        """
        self._descriptor = descriptor
        self._bridge = bridge
        self._sink = sink
        self._init_delay = init_delay
        self._retry_interval = retry_interval
        self.state = DeviceState()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._in_flight = False
        self._closed = False

    @property
    def descriptor(self) -> DeviceDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name or self._descriptor.device_id

    @property
    def retry_pending(self) -> bool:
        """True while a bootstrap timer is scheduled."""
        return self._timer is not None

    @property
    def bootstrap_running(self) -> bool:
        return self._in_flight

    @property
    def is_available(self) -> bool:
        return self.state.availability == Availability.AVAILABLE

    @property
    def timer(self) -> Optional[asyncio.TimerHandle]:
        return self._timer

    # Lifecycle

    async def on_ready(self) -> bool:
        """Entry point once the device entity exists.

        Marks the device unavailable, waits for the bridge and schedules the
        first bootstrap attempt.

        Returns:
            True if a bootstrap was scheduled
        """
        if not self.is_available:
            await self._publish_unavailable("initialising")
        logger.info(f"Device initialising (name={self.name}, kind={self._descriptor.kind.value})")

        try:
            ready = await self._bridge.wait_for_bridge_ready()
        except Exception as e:
            logger.error(f"{self.name}: waiting for bridge failed: {e}")
            return False

        if not ready:
            logger.warning(f"{self.name}: bridge not ready, device stays initialising")
            return False

        return self.schedule_bootstrap()

    def schedule_bootstrap(self, delay: Optional[float] = None) -> bool:
        """Schedule a bootstrap attempt after ``delay`` seconds.

        Does nothing while an attempt is already scheduled or running, or
        after teardown.

        Args:
            delay: Seconds to wait, defaults to the initial delay

        Returns:
            True if a new attempt was scheduled
        """
        if self._closed:
            logger.debug(f"{self.name}: torn down, not scheduling bootstrap")
            return False
        if self.retry_pending or self._in_flight:
            logger.debug(f"{self.name}: bootstrap already pending")
            return False

        if delay is None:
            delay = self._init_delay

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._start_bootstrap)
        logger.debug(f"{self.name}: bootstrap scheduled in {delay:.1f}s")
        return True

    def _start_bootstrap(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._task = asyncio.get_running_loop().create_task(self.bootstrap())

    async def bootstrap(self) -> bool:
        """Run one bootstrap attempt.

        Steps run in order and stop at the first failure: device values,
        energy values, webhook registration. A failed attempt schedules the
        next one after the retry interval.

        Returns:
            True if the device is now available
        """
        if self._closed:
            logger.debug(f"{self.name}: torn down, not bootstrapping")
            return False
        if self._in_flight or self.retry_pending:
            logger.debug(f"{self.name}: bootstrap already running or scheduled")
            return False

        logger.info(f"{self.name}: getting values")
        self._in_flight = True
        try:
            success = (
                await self.get_device_values()
                and await self.get_energy_values()
                and await self.register_webhooks()
            )
        finally:
            self._in_flight = False

        if self._closed:
            logger.debug(f"{self.name}: torn down during bootstrap, discarding result")
            return False

        if success:
            self.state.availability = Availability.AVAILABLE
            self.state.init_retry_count = 0
            await self._publish_available()
            logger.info(f"{self.name}: device available")
            return True

        self.state.init_retry_count += 1
        logger.warning(
            f"{self.name}: bootstrap attempt {self.state.init_retry_count} failed, "
            f"retrying in {self._retry_interval:.0f}s"
        )
        self.schedule_bootstrap(self._retry_interval)
        return False

    def teardown(self) -> None:
        """Cancel any pending or running bootstrap. The engine stays inert afterwards.

        The sink is told the device was removed when an event loop is
        running; without one only the local state changes.
        """
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.state.availability = Availability.UNAVAILABLE

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._task = loop.create_task(self._publish_unavailable("removed"))
        logger.debug(f"{self.name}: torn down")

    # Reads

    async def get_device_values(self) -> bool:
        """Read the switch and, when needed, the dim level.

        The dim level is only read when the switch is on, or when no dim
        level is known yet so a cold-started dimmer gets a brightness.

        Returns:
            True if every required read succeeded
        """
        result = await self._read(FeatureRole.SWITCH)
        if not result.success:
            return False

        on_off = translator.switch_from_raw(result.value)
        if on_off is not None:
            await self._apply(FeatureRole.SWITCH, on_off)
        else:
            logger.debug(f"{self.name}: ignoring switch value {result.value!r}")

        if self._descriptor.supports(FeatureRole.DIM_LEVEL) and (
            on_off is True or self.state.dim_fraction is None
        ):
            return await self._refresh_dim_level()
        return True

    async def get_energy_values(self) -> bool:
        """Read energy and power for devices that have them."""
        for role in (FeatureRole.ENERGY, FeatureRole.POWER):
            if not self._descriptor.supports(role):
                continue
            result = await self._read(role)
            if not result.success:
                return False
            value = translator.from_raw(role, result.value)
            if value is not None:
                await self._apply(role, value)
        return True

    async def register_webhooks(self) -> bool:
        """Register one webhook per supported feature."""
        roles = self._descriptor.supported_roles()
        results = await asyncio.gather(
            *(
                self._call_bridge(
                    self._bridge.register_webhook,
                    self._descriptor.feature_id(role),
                    WEBHOOK_SCOPE,
                    self._descriptor.webhook_key(role),
                )
                for role in roles
            )
        )

        failed = [role.value for role, result in zip(roles, results) if not result.success]
        if failed:
            logger.warning(f"{self.name}: failed to create webhooks for {failed}")
            return False
        return True

    async def _refresh_dim_level(self) -> bool:
        result = await self._read(FeatureRole.DIM_LEVEL)
        if not result.success:
            return False
        dim = translator.dim_from_raw(result.value)
        if dim is not None:
            await self._apply(FeatureRole.DIM_LEVEL, dim)
        return True

    # Commands

    async def set_switch(self, on: bool) -> bool:
        """Switch the device on or off.

        Local state is left alone; a later read or webhook confirms it.

        Returns:
            True if the bridge accepted the write
        """
        result = await self._call_bridge(
            self._bridge.set_feature_value,
            self._descriptor.switch,
            translator.switch_to_raw(on),
        )
        return result.success

    async def set_dim(self, fraction: float) -> bool:
        """Set the dim level from a 0-1 fraction. The caller keeps it in range."""
        if not self._descriptor.supports(FeatureRole.DIM_LEVEL):
            logger.warning(f"{self.name}: device has no dim level")
            return False
        result = await self._call_bridge(
            self._bridge.set_feature_value,
            self._descriptor.dim_level,
            translator.dim_to_raw(fraction),
        )
        return result.success

    async def on_command(self, role: Union[FeatureRole, str], value: Any) -> bool:
        """Entry point for capability changes requested by the host."""
        try:
            role = FeatureRole(role)
        except ValueError:
            logger.warning(f"{self.name}: unknown command role {role!r}")
            return False

        if role == FeatureRole.SWITCH:
            if not isinstance(value, bool):
                logger.warning(f"{self.name}: switch command needs a bool, got {value!r}")
                return False
            return await self.set_switch(value)
        if role == FeatureRole.DIM_LEVEL:
            return await self.set_dim(float(value))

        logger.warning(f"{self.name}: {role.value} is read-only")
        return False

    # Webhooks

    async def on_webhook(self, role: Union[FeatureRole, str], raw_value: Any) -> bool:
        """Apply a value pushed by the bridge.

        Never raises. Unknown or unsupported roles are ignored.

        Returns:
            True if the value was applied
        """
        try:
            role = FeatureRole(role)
        except ValueError:
            logger.debug(f"{self.name}: ignoring webhook for unknown role {role!r}")
            return False

        if not self._descriptor.supports(role):
            logger.debug(f"{self.name}: ignoring webhook for unsupported role {role.value}")
            return False

        try:
            return await self._apply_webhook(role, raw_value)
        except Exception as e:
            logger.warning(f"{self.name}: webhook value not applied ({role.value}={raw_value!r}): {e}")
            return False

    async def _apply_webhook(self, role: FeatureRole, raw_value: Any) -> bool:
        value = translator.from_raw(role, raw_value)
        if value is None:
            logger.debug(f"{self.name}: ignoring webhook value {role.value}={raw_value!r}")
            return False

        await self._apply(role, value)

        # Switch-on deliveries don't carry the dim level
        if role == FeatureRole.SWITCH and value and self._descriptor.supports(FeatureRole.DIM_LEVEL):
            if not await self._refresh_dim_level():
                logger.warning(f"{self.name}: webhook value not applied, dim level read failed")
                return False
        return True

    # Helpers

    def snapshot(self) -> dict[str, Any]:
        """Current normalized state for status reporting."""
        return {
            "device_id": self._descriptor.device_id,
            "name": self._descriptor.name,
            "kind": self._descriptor.kind.value,
            "on_off": self.state.on_off,
            "dim": self.state.dim_fraction,
            "power": self.state.power_watts,
            "energy": self.state.energy_kwh,
            "availability": self.state.availability.value,
            "init_retry_count": self.state.init_retry_count,
        }

    async def _read(self, role: FeatureRole) -> BridgeResult:
        return await self._call_bridge(self._bridge.get_feature_value, self._descriptor.feature_id(role))

    async def _call_bridge(self, call: Callable[..., Awaitable[Any]], *args: Any) -> BridgeResult:
        try:
            value = await call(*args)
        except Exception as e:
            operation = getattr(call, "__name__", "bridge call")
            logger.warning(f"{self.name}: {operation}{args} failed: {e}")
            return BridgeResult(success=False, error=e)
        return BridgeResult(success=True, value=value)

    async def _apply(self, role: FeatureRole, value: Any) -> None:
        setattr(self.state, _STATE_FIELDS[role], value)
        await self._publish(translator.CAPABILITY_NAMES[role], value)

    async def _publish(self, capability: str, value: Any) -> None:
        try:
            await self._sink.set_capability_value(capability, value)
        except Exception as e:
            logger.warning(f"{self.name}: failed to set {capability}={value!r}: {e}")

    async def _publish_available(self) -> None:
        try:
            await self._sink.set_available()
        except Exception as e:
            logger.warning(f"{self.name}: failed to set available: {e}")

    async def _publish_unavailable(self, reason: str) -> None:
        try:
            await self._sink.set_unavailable(reason)
        except Exception as e:
            logger.warning(f"{self.name}: failed to set unavailable: {e}")
