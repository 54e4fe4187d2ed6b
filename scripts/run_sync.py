"""Entry point to start device synchronization.

Usage:
    uv run python scripts/run_sync.py                  # Use ~/.lwsync/config.json if present
    uv run python scripts/run_sync.py --config my.json
    uv run python scripts/run_sync.py --debug

Every dimmer and socket listed by the bridge is bootstrapped, staggered by
its start-up slot, and kept in sync until Ctrl+C. Webhook deliveries can be
fed in as JSON lines on stdin with --stdin-webhooks:
    {"id": "lwdimmer_42_switch", "payload": {"value": 1}}
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from lwsync.bridge.config import load_config
from lwsync.bridge.service import SyncService
from lwsync.devices.mock_bridge import MockBridge
from lwsync.logging import DynamoCapabilityLogger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ENV_FILE = Path.home() / ".lwsync" / ".env"


async def read_webhooks(service: SyncService) -> None:
    """Feed JSON webhook deliveries from stdin to the router."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            return
        line = line.strip()
        if line:
            applied = await service.router.handle_payload(line.encode("utf-8"))
            logger.info(f"Webhook {'applied' if applied else 'not applied'}: {line}")


async def main(args: argparse.Namespace) -> int:
    """Main entry point."""
    if ENV_FILE.exists():
        load_dotenv(ENV_FILE)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    history_logger = DynamoCapabilityLogger(config.history_table) if config.history_table else None
    bridge = MockBridge(config.state_file)
    service = SyncService(bridge, config, history_logger)

    # Set up graceful shutdown
    shutdown_event = asyncio.Event()

    def handle_signal():
        logger.info("Shutdown signal received")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal)

    logger.info("Starting device sync...")
    if not await service.start():
        logger.error("Failed to start device sync")
        return 1

    logger.info(f"Devices: {service.registry.list_device_ids()}")
    logger.info("Press Ctrl+C to stop")

    webhook_task = None
    if args.stdin_webhooks:
        webhook_task = asyncio.create_task(read_webhooks(service))

    await shutdown_event.wait()

    logger.info("Stopping device sync...")
    if webhook_task is not None:
        webhook_task.cancel()
    await service.stop()
    logger.info("Device sync stopped")

    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Keep Lightwave dimmers and sockets in sync with the bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to sync config file (default: ~/.lwsync/config.json)",
    )
    parser.add_argument(
        "--stdin-webhooks",
        action="store_true",
        help="Read webhook deliveries as JSON lines from stdin",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    sys.exit(asyncio.run(main(args)))
