"""Configuration loader for the device sync service."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lwsync.devices.descriptor import DeviceKind
from lwsync.devices.sync_engine import DEFAULT_RETRY_INTERVAL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.lwsync/config.json"
DEFAULT_STATE_FILE = "~/.lwsync/bridge_state.json"

# Seconds of initial delay per device slot, staggering bulk start-up
DEFAULT_INIT_DELAY = {
    DeviceKind.DIMMER: 2.0,
    DeviceKind.SOCKET: 1.0,
}


@dataclass
class SyncConfig:
    """Timing and storage settings for device synchronization."""

    init_delay: dict[DeviceKind, float] = field(default_factory=lambda: dict(DEFAULT_INIT_DELAY))
    retry_interval: float = DEFAULT_RETRY_INTERVAL
    state_file: Path = field(default_factory=lambda: Path(DEFAULT_STATE_FILE).expanduser())
    history_table: Optional[str] = None

    def init_delay_for(self, kind: DeviceKind) -> float:
        return self.init_delay.get(kind, 0.0)

    def validate(self) -> None:
        """Validate that all delays are non-negative."""
        for kind, delay in self.init_delay.items():
            if delay < 0:
                raise ValueError(f"init_delay for {kind.value} must be >= 0, got {delay}")
        if self.retry_interval < 0:
            raise ValueError(f"retry_interval must be >= 0, got {self.retry_interval}")


def load_config(config_path: Optional[str] = None) -> SyncConfig:
    """Load sync configuration from file with environment variable overrides.

    Environment variables:
        LWSYNC_CONFIG_PATH: Override config file location
        LWSYNC_RETRY_INTERVAL: Override retry interval in seconds
        LWSYNC_STATE_FILE: Override mock bridge state file
        LWSYNC_HISTORY_TABLE: DynamoDB table for capability history

    Args:
        config_path: Path to config JSON file. Defaults to ~/.lwsync/config.json

    Returns:
        Validated SyncConfig

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    explicit = config_path or os.environ.get("LWSYNC_CONFIG_PATH")
    config_file = Path(explicit or DEFAULT_CONFIG_PATH).expanduser()

    data = {}
    if config_file.exists():
        with open(config_file) as f:
            data = json.load(f)
    elif explicit:
        raise FileNotFoundError(f"Sync config not found at {config_file}")
    else:
        logger.info(f"No config at {config_file}, using defaults")

    init_delay = dict(DEFAULT_INIT_DELAY)
    for kind, delay in data.get("init_delay", {}).items():
        init_delay[DeviceKind(kind)] = float(delay)

    retry_interval = float(
        os.environ.get("LWSYNC_RETRY_INTERVAL", data.get("retry_interval", DEFAULT_RETRY_INTERVAL))
    )
    state_file = Path(
        os.environ.get("LWSYNC_STATE_FILE", data.get("state_file", DEFAULT_STATE_FILE))
    ).expanduser()
    history_table = os.environ.get("LWSYNC_HISTORY_TABLE", data.get("history_table"))

    config = SyncConfig(
        init_delay=init_delay,
        retry_interval=retry_interval,
        state_file=state_file,
        history_table=history_table,
    )
    config.validate()

    logger.info(f"Loaded sync config: retry_interval={retry_interval}, state_file={state_file}")
    return config
