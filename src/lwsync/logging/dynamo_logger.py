"""DynamoDB history logger for device capability changes."""

import logging
import os
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "lwsync-capability-log"
DEFAULT_REGION = "eu-central-1"
TTL_DAYS = 30


class DynamoCapabilityLogger:
    """Fire-and-forget logger that writes capability changes to DynamoDB.

    Lazy-initializes the boto3 Table resource on first write.
    After any connection/table failure, sets ``_disabled`` to avoid retrying.
    """

    def __init__(self, table_name: str | None = None, profile_name: str | None = None) -> None:
        self._table_name = table_name
        self._profile_name = profile_name
        self._table = None
        self._disabled = False

    def _get_table(self):
        """Lazily create and return the DynamoDB Table resource."""
        if self._table is not None:
            return self._table

        table_name = self._table_name or os.environ.get("DYNAMODB_TABLE_NAME", DEFAULT_TABLE_NAME)
        region = os.environ.get("AWS_DEFAULT_REGION", DEFAULT_REGION)

        session_kwargs = {"region_name": region}
        if self._profile_name:
            session_kwargs["profile_name"] = self._profile_name

        session = boto3.Session(**session_kwargs)
        dynamodb = session.resource("dynamodb")
        self._table = dynamodb.Table(table_name)
        return self._table

    async def log_capability_change(self, device_id: str, capability: str, value: Any) -> None:
        """Record a capability change.

        Failures are logged as warnings and never propagate to the caller.

        Args:
            device_id: Registry id of the device (e.g. ``lwdimmer_42``).
            capability: Capability name (``onoff``, ``dim``, ``measure_power``, ``meter_power``).
            value: New normalized value; bools are stored as-is, numbers as Decimal.
        """
        if self._disabled:
            return

        try:
            table = self._get_table()

            now = datetime.now(timezone.utc)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = Decimal(str(value))

            item = {
                "device_id": device_id,
                "timestamp": now.isoformat(timespec="microseconds"),
                "capability": capability,
                "value": value,
                "ttl": int((now + timedelta(days=TTL_DAYS)).timestamp()),
            }

            table.put_item(Item=item)
        except (BotoCoreError, ClientError, Exception) as exc:
            logger.warning("DynamoDB logging failed, disabling logger: %s", exc)
            self._disabled = True
