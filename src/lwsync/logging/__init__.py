"""Capability history logging."""

from lwsync.logging.dynamo_logger import DynamoCapabilityLogger

__all__ = ["DynamoCapabilityLogger"]
