"""Provision the capability history table that DynamoCapabilityLogger writes to.

Items are keyed by registry device id (``lwdimmer_42``) and an ISO timestamp,
and expire through the ``ttl`` attribute after the logger's retention period.

Usage:
    uv run python scripts/create_dynamodb_table.py
    uv run python scripts/create_dynamodb_table.py --table my-history --config my.json

The table name comes from --table, then ``history_table`` in the lwsync
config, then DYNAMODB_TABLE_NAME, then the logger's default.
"""

import argparse
import os
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from lwsync.bridge.config import load_config
from lwsync.logging.dynamo_logger import DEFAULT_REGION, DEFAULT_TABLE_NAME, TTL_DAYS

KEY_SCHEMA = [
    {"AttributeName": "device_id", "KeyType": "HASH"},
    {"AttributeName": "timestamp", "KeyType": "RANGE"},
]


def resolve_table_name(args: argparse.Namespace) -> str:
    if args.table:
        return args.table
    config = load_config(Path(args.config) if args.config else None)
    return config.history_table or os.environ.get("DYNAMODB_TABLE_NAME", DEFAULT_TABLE_NAME)


def ensure_history_table(client, table_name: str) -> bool:
    """Create the history table and enable expiry.

    Returns:
        False if the table already existed
    """
    try:
        client.create_table(
            TableName=table_name,
            KeySchema=KEY_SCHEMA,
            AttributeDefinitions=[
                {"AttributeName": key["AttributeName"], "AttributeType": "S"} for key in KEY_SCHEMA
            ],
            BillingMode="PAY_PER_REQUEST",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceInUseException":
            raise
        print(f"History table '{table_name}' already exists, leaving it as is.")
        return False

    print(f"Creating history table '{table_name}'...")
    client.get_waiter("table_exists").wait(TableName=table_name)

    client.update_time_to_live(
        TableName=table_name,
        TimeToLiveSpecification={"Enabled": True, "AttributeName": "ttl"},
    )
    print(f"Capability changes in '{table_name}' expire after {TTL_DAYS} days.")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the lwsync capability history table")
    parser.add_argument("--table", help="Table name to create")
    parser.add_argument("--config", help="Path to the lwsync config file")
    args = parser.parse_args()

    session = boto3.Session(
        profile_name=os.environ.get("AWS_PROFILE"),
        region_name=os.environ.get("AWS_DEFAULT_REGION", DEFAULT_REGION),
    )
    ensure_history_table(session.client("dynamodb"), resolve_table_name(args))


if __name__ == "__main__":
    main()
