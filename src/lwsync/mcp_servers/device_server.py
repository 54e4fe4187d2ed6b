"""MCP server for controlling Lightwave dimmers and sockets."""

import logging
import os
from pathlib import Path
from fastmcp import FastMCP
from dotenv import dotenv_values

from lwsync.bridge.config import load_config
from lwsync.bridge.service import SyncService
from lwsync.devices.mock_bridge import MockBridge
from lwsync.logging import DynamoCapabilityLogger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
app = FastMCP("Lightwave Device Control")

ENV_FILE = Path.home() / ".lwsync" / ".env"

# Lazily started service
service = None


async def get_service() -> SyncService:
    """Get or start the sync service.

    Settings in ~/.lwsync/.env are applied as environment variables before the
    config is loaded. Devices come from the mock bridge state file.
    """
    global service
    if service is not None:
        return service

    for key, value in dotenv_values(ENV_FILE).items():
        if value is not None:
            os.environ.setdefault(key, value)

    config = load_config()
    history_logger = DynamoCapabilityLogger(config.history_table) if config.history_table else None
    bridge = MockBridge(config.state_file)

    service = SyncService(bridge, config, history_logger)
    if not await service.start():
        logger.warning("Sync service did not start, no devices available")
    return service


def _format_state(state: dict) -> str:
    on_off = state["on_off"]
    switch = "unknown" if on_off is None else ("ON" if on_off else "OFF")
    lines = [
        f"{state['name'] or state['device_id']} ({state['kind']}) is {switch}",
        f"Availability: {state['availability']}",
    ]
    if state["dim"] is not None:
        lines.append(f"Dim level: {round(state['dim'] * 100)}%")
    if state["power"] is not None:
        lines.append(f"Power: {state['power']} W")
    if state["energy"] is not None:
        lines.append(f"Energy: {state['energy']} kWh")
    return "\n".join(lines)


@app.tool()
async def list_devices() -> str:
    """List the devices known to the bridge.

    Returns:
        One line per device with its id and availability
    """
    logger.info("Tool called: list_devices")
    s = await get_service()
    engines = s.registry.get_all()
    if not engines:
        return "No devices paired"
    return "\n".join(
        f"{device_id}: {engine.name} ({engine.state.availability.value})"
        for device_id, engine in engines.items()
    )


@app.tool()
async def turn_on(device_id: str) -> str:
    """Turn a dimmer or socket on.

    Args:
        device_id: Device id as shown by list_devices

    Returns:
        A message confirming the command was sent
    """
    logger.info("Tool called: turn_on(%s)", device_id)
    engine = (await get_service()).get_engine(device_id)
    if engine is None:
        return f"✗ Unknown device: {device_id}"
    if await engine.set_switch(True):
        return f"✓ Turn on sent to {engine.name}"
    return f"✗ Failed to turn on {engine.name}"


@app.tool()
async def turn_off(device_id: str) -> str:
    """Turn a dimmer or socket off.

    Args:
        device_id: Device id as shown by list_devices

    Returns:
        A message confirming the command was sent
    """
    logger.info("Tool called: turn_off(%s)", device_id)
    engine = (await get_service()).get_engine(device_id)
    if engine is None:
        return f"✗ Unknown device: {device_id}"
    if await engine.set_switch(False):
        return f"✓ Turn off sent to {engine.name}"
    return f"✗ Failed to turn off {engine.name}"


@app.tool()
async def set_dim(device_id: str, level: int) -> str:
    """Set the dim level of a dimmer.

    Args:
        device_id: Device id as shown by list_devices
        level: Dim level from 0 to 100

    Returns:
        A message confirming the dim level was sent
    """
    logger.info("Tool called: set_dim(%s, %d)", device_id, level)
    if not 0 <= level <= 100:
        return f"✗ Dim level must be 0-100, got {level}"
    engine = (await get_service()).get_engine(device_id)
    if engine is None:
        return f"✗ Unknown device: {device_id}"
    if await engine.set_dim(level / 100):
        return f"✓ Dim level {level}% sent to {engine.name}"
    return f"✗ Failed to set dim level on {engine.name}"


@app.tool()
async def get_status(device_id: str) -> str:
    """Get the last known state of a device.

    Args:
        device_id: Device id as shown by list_devices

    Returns:
        Switch state, availability, and dim/power/energy where supported
    """
    logger.info("Tool called: get_status(%s)", device_id)
    engine = (await get_service()).get_engine(device_id)
    if engine is None:
        return f"✗ Unknown device: {device_id}"
    return _format_state(engine.snapshot())


@app.tool()
async def refresh(device_id: str) -> str:
    """Read the current values of a device from the bridge.

    Args:
        device_id: Device id as shown by list_devices

    Returns:
        The refreshed state, or an error if the bridge could not be read
    """
    logger.info("Tool called: refresh(%s)", device_id)
    engine = (await get_service()).get_engine(device_id)
    if engine is None:
        return f"✗ Unknown device: {device_id}"
    if await engine.get_device_values() and await engine.get_energy_values():
        return _format_state(engine.snapshot())
    return f"✗ Failed to read values from {engine.name}"


if __name__ == "__main__":
    app.run()
