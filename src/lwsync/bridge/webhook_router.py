"""Routes webhook deliveries from the bridge to device engines."""

import json
import logging
from typing import Any

from lwsync.bridge.device_registry import DeviceRegistry
from lwsync.devices.descriptor import parse_webhook_key

logger = logging.getLogger(__name__)


class WebhookRouter:
    """Dispatch inbound webhooks by key.

    Keys have the form ``{driverKind}_{externalId}_{featureRole}``; the part
    before the role is the registry ID of the device. Nothing here raises, a
    delivery that cannot be applied just returns False.
    """

    def __init__(self, registry: DeviceRegistry):
        self._registry = registry

    async def dispatch(self, webhook_key: str, value: Any) -> bool:
        """Apply a webhook value to the device it belongs to.

        Args:
            webhook_key: Key registered with the bridge for the feature
            value: Raw value pushed by the bridge

        Returns:
            True if the device applied the value
        """
        try:
            driver_id, external_id, role = parse_webhook_key(webhook_key)
        except ValueError as e:
            logger.warning(str(e))
            return False

        device_id = f"{driver_id}_{external_id}"
        engine = self._registry.get(device_id)
        if engine is None:
            logger.warning(f"Webhook for unknown device: {device_id}")
            return False

        logger.debug(f"Webhook received: device={device_id}, role={role}, value={value!r}")
        return await engine.on_webhook(role, value)

    async def handle_payload(self, payload: bytes) -> bool:
        """Handle a raw webhook delivery.

        Args:
            payload: JSON body ``{"id": <webhook key>, "payload": {"value": <raw>}}``
        """
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Malformed webhook payload: {e}")
            return False

        if not isinstance(data, dict):
            logger.warning("Webhook payload is not an object")
            return False

        webhook_key = data.get("id")
        body = data.get("payload")
        if not isinstance(webhook_key, str) or not isinstance(body, dict) or "value" not in body:
            logger.warning(f"Webhook payload missing id or value: {data}")
            return False

        return await self.dispatch(webhook_key, body["value"])
