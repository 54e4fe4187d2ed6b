"""In-memory capability sink for a single device."""

import logging
from typing import Any, Optional

from lwsync.devices.base import CapabilitySink

logger = logging.getLogger(__name__)


class CapabilityStore(CapabilitySink):
    """Holds the latest capability values and availability of one device.

    If a history logger is attached, every capability change is also
    forwarded to it. The logger is fire-and-forget and must not raise.
    """

    def __init__(self, device_id: str, history_logger=None):
        self.device_id = device_id
        self.values: dict[str, Any] = {}
        self.available = False
        self.unavailable_reason: Optional[str] = None
        self._history_logger = history_logger

    async def set_capability_value(self, name: str, value: Any) -> None:
        previous = self.values.get(name)
        self.values[name] = value
        logger.debug(f"{self.device_id}: {name}={value!r}")

        if self._history_logger is not None and previous != value:
            await self._history_logger.log_capability_change(self.device_id, name, value)

    async def set_available(self) -> None:
        self.available = True
        self.unavailable_reason = None
        logger.info(f"{self.device_id}: available")

    async def set_unavailable(self, reason: str) -> None:
        self.available = False
        self.unavailable_reason = reason
        logger.info(f"{self.device_id}: unavailable ({reason})")

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)
