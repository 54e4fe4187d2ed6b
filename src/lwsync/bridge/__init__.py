"""Driver, registry and webhook routing for bridge-connected devices."""

from lwsync.bridge.config import SyncConfig, load_config
from lwsync.bridge.device_registry import DeviceRegistry
from lwsync.bridge.driver import InitSlots, LightwaveDriver
from lwsync.bridge.service import SyncService
from lwsync.bridge.webhook_router import WebhookRouter

__all__ = [
    "DeviceRegistry",
    "InitSlots",
    "LightwaveDriver",
    "SyncConfig",
    "SyncService",
    "WebhookRouter",
    "load_config",
]
