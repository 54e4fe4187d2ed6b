"""Device modules for Lightwave dimmers and sockets."""

from .base import BridgeGateway, CapabilitySink
from .capability_store import CapabilityStore
from .descriptor import DeviceDescriptor, DeviceKind, FeatureRole
from .mock_bridge import MockBridge
from .sync_engine import Availability, DeviceState, DeviceSyncEngine

__all__ = [
    "Availability",
    "BridgeGateway",
    "CapabilitySink",
    "CapabilityStore",
    "DeviceDescriptor",
    "DeviceKind",
    "DeviceState",
    "DeviceSyncEngine",
    "FeatureRole",
    "MockBridge",
]
