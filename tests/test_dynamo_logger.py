"""Tests for DynamoCapabilityLogger using moto for in-memory DynamoDB."""

from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws
from boto3.dynamodb.conditions import Key

from lwsync.logging import DynamoCapabilityLogger

TABLE_NAME = "lwsync-capability-log"
REGION = "eu-central-1"
DEVICE_ID = "lwdimmer_42"


def _create_table(dynamodb):
    """Create the DynamoDB table used by the logger."""
    dynamodb.create_table(
        TableName=TABLE_NAME,
        KeySchema=[
            {"AttributeName": "device_id", "KeyType": "HASH"},
            {"AttributeName": "timestamp", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "device_id", "AttributeType": "S"},
            {"AttributeName": "timestamp", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def aws_env(monkeypatch):
    """Set env vars so the logger finds the right table and region."""
    monkeypatch.setenv("DYNAMODB_TABLE_NAME", TABLE_NAME)
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")


@pytest.fixture
def dynamodb_table(aws_env):
    """Provide a moto-backed DynamoDB table and a logger writing to it."""
    with mock_aws():
        session = boto3.Session(region_name=REGION)
        dynamodb = session.resource("dynamodb")
        _create_table(dynamodb)
        table = dynamodb.Table(TABLE_NAME)

        logger = DynamoCapabilityLogger()
        logger._table = table

        yield logger, table


@pytest.mark.asyncio
async def test_log_capability_change_writes_item(dynamodb_table):
    logger, table = dynamodb_table

    await logger.log_capability_change(DEVICE_ID, "onoff", True)

    resp = table.query(KeyConditionExpression=Key("device_id").eq(DEVICE_ID))
    assert resp["Count"] == 1


@pytest.mark.asyncio
async def test_item_contains_expected_fields(dynamodb_table):
    logger, table = dynamodb_table

    await logger.log_capability_change(DEVICE_ID, "dim", 0.55)

    resp = table.query(KeyConditionExpression=Key("device_id").eq(DEVICE_ID))
    item = resp["Items"][0]

    assert item["device_id"] == DEVICE_ID
    assert item["capability"] == "dim"
    assert float(item["value"]) == pytest.approx(0.55)
    assert "timestamp" in item
    assert "ttl" in item


@pytest.mark.asyncio
async def test_bool_values_stay_bool(dynamodb_table):
    logger, table = dynamodb_table

    await logger.log_capability_change(DEVICE_ID, "onoff", False)

    resp = table.query(KeyConditionExpression=Key("device_id").eq(DEVICE_ID))
    assert resp["Items"][0]["value"] is False


@pytest.mark.asyncio
async def test_events_queryable_in_order(dynamodb_table):
    logger, table = dynamodb_table

    await logger.log_capability_change(DEVICE_ID, "onoff", True)
    await logger.log_capability_change(DEVICE_ID, "dim", 0.3)
    await logger.log_capability_change(DEVICE_ID, "onoff", False)

    resp = table.query(
        KeyConditionExpression=(
            Key("device_id").eq(DEVICE_ID) & Key("timestamp").gte("2000-01-01")
        )
    )
    assert resp["Count"] == 3

    capabilities = [item["capability"] for item in resp["Items"]]
    assert capabilities == ["onoff", "dim", "onoff"]


@pytest.mark.asyncio
async def test_explicit_table_name(aws_env):
    with mock_aws():
        dynamodb = boto3.Session(region_name=REGION).resource("dynamodb")
        _create_table(dynamodb)

        logger = DynamoCapabilityLogger(table_name=TABLE_NAME)
        await logger.log_capability_change(DEVICE_ID, "measure_power", 40)

        table = dynamodb.Table(TABLE_NAME)
        resp = table.query(KeyConditionExpression=Key("device_id").eq(DEVICE_ID))
        assert resp["Items"][0]["value"] == 40


@pytest.mark.asyncio
async def test_graceful_degradation_no_credentials():
    """When boto3 session creation fails, logger should disable itself, not raise."""
    logger = DynamoCapabilityLogger()
    with patch("lwsync.logging.dynamo_logger.boto3.Session", side_effect=Exception("no credentials")):
        await logger.log_capability_change(DEVICE_ID, "onoff", True)
    assert logger._disabled is True


@pytest.mark.asyncio
async def test_graceful_degradation_no_table(aws_env):
    """With moto active but no table created, logger should disable itself."""
    with mock_aws():
        dynamodb = boto3.Session(region_name=REGION).resource("dynamodb")
        logger = DynamoCapabilityLogger()
        logger._table = dynamodb.Table("nonexistent-table")

        await logger.log_capability_change(DEVICE_ID, "onoff", True)
        assert logger._disabled is True


@pytest.mark.asyncio
async def test_disabled_flag_prevents_retries(dynamodb_table):
    logger, table = dynamodb_table

    logger._disabled = True
    await logger.log_capability_change(DEVICE_ID, "onoff", True)

    resp = table.query(KeyConditionExpression=Key("device_id").eq(DEVICE_ID))
    assert resp["Count"] == 0
