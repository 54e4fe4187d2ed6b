"""File-backed stand-in for the Lightwave bridge."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

from lwsync.devices.base import BridgeGateway
from lwsync.devices.descriptor import DeviceDescriptor, DeviceKind

logger = logging.getLogger(__name__)

# Returned for features the bridge knows nothing about
UNKNOWN_VALUE = -1


class MockBridge(BridgeGateway):
    """Mock implementation of the Lightwave bridge.

    Simulates a bridge for development and testing. Devices, feature values
    and webhook registrations are persisted to a JSON file so they survive
    restarts:

        {
          "devices": {"dimmer": [{"name": ..., "data": {"id": ..., "switch": ...}}]},
          "features": {"<featureId>": 1},
          "webhooks": {"<webhookKey>": "<featureId>"}
        }
    """

    def __init__(self, state_file: Path):
        self.state_file = state_file
        self.state = self._load_state()
        self.simulate_failure = False
        logger.info(f"MockBridge initialized with {len(self.state['features'])} features")

    def _load_state(self) -> Dict[str, Any]:
        if self.state_file.exists():
            try:
                with open(self.state_file, 'r') as f:
                    state = json.load(f)
                    logger.info(f"Loaded bridge state from {self.state_file}")
                    state.setdefault("devices", {})
                    state.setdefault("features", {})
                    state.setdefault("webhooks", {})
                    return state
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load bridge state file: {e}. Using empty state.")

        return {
            "devices": {},
            "features": {},
            "webhooks": {},
            "last_updated": datetime.now().isoformat(),
        }

    def _save_state(self) -> None:
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            self.state["last_updated"] = datetime.now().isoformat()
            with open(self.state_file, 'w') as f:
                json.dump(self.state, f, indent=2)
            logger.debug(f"Bridge state saved to {self.state_file}")
        except IOError as e:
            logger.error(f"Failed to save bridge state: {e}")

    def _check(self) -> None:
        if self.simulate_failure:
            raise ConnectionError("Simulated bridge failure")

    def add_device(self, kind: DeviceKind, pairing_data: Dict[str, Any], values: Dict[str, Any] = None) -> None:
        """Add a pairable device and optionally seed its feature values."""
        self.state["devices"].setdefault(DeviceKind(kind).value, []).append(pairing_data)
        for feature_id, value in (values or {}).items():
            self.state["features"][feature_id] = value
        self._save_state()

    async def wait_for_bridge_ready(self) -> bool:
        self._check()
        return True

    async def get_feature_value(self, feature_id: str) -> Union[int, float]:
        self._check()
        return self.state["features"].get(feature_id, UNKNOWN_VALUE)

    async def set_feature_value(self, feature_id: str, value: Union[str, int, float]) -> None:
        self._check()
        # Switch writes arrive as "0"/"1" strings
        if isinstance(value, str):
            value = int(value)
        logger.info(f"Setting feature {feature_id} to {value} (mock)")
        self.state["features"][feature_id] = value
        self._save_state()

    async def register_webhook(self, feature_id: str, scope: str, webhook_key: str) -> None:
        self._check()
        if not feature_id:
            raise ValueError(f"Cannot register webhook {webhook_key} without a feature id")
        logger.debug(f"Registered {scope} webhook {webhook_key} for {feature_id} (mock)")
        self.state["webhooks"][webhook_key] = feature_id
        self._save_state()

    async def get_devices_of_type(self, kind: str) -> list[DeviceDescriptor]:
        self._check()
        descriptors = []
        for data in self.state["devices"].get(kind, []):
            try:
                descriptors.append(DeviceDescriptor.from_pairing_data(DeviceKind(kind), data))
            except ValueError as e:
                logger.warning(f"Skipping unpairable {kind}: {e}")
        return descriptors

