"""Tests for sync configuration loading."""

import json

import pytest

from lwsync.bridge.config import SyncConfig, load_config
from lwsync.devices import DeviceKind


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Keep the real ~/.lwsync and any LWSYNC_* variables out of the tests."""
    for var in ("LWSYNC_CONFIG_PATH", "LWSYNC_RETRY_INTERVAL", "LWSYNC_STATE_FILE", "LWSYNC_HISTORY_TABLE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("lwsync.bridge.config.DEFAULT_CONFIG_PATH", str(tmp_path / "absent.json"))


def test_defaults():
    config = SyncConfig()

    assert config.retry_interval == 60.0
    assert config.init_delay_for(DeviceKind.DIMMER) == 2.0
    assert config.init_delay_for(DeviceKind.SOCKET) == 1.0
    assert config.history_table is None


def test_missing_default_file_gives_defaults():
    config = load_config()

    assert config.retry_interval == 60.0


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_from_file(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps(
            {
                "init_delay": {"dimmer": 5},
                "retry_interval": 30,
                "state_file": str(tmp_path / "bridge.json"),
                "history_table": "history",
            }
        )
    )

    config = load_config(str(config_file))

    assert config.init_delay_for(DeviceKind.DIMMER) == 5.0
    assert config.init_delay_for(DeviceKind.SOCKET) == 1.0
    assert config.retry_interval == 30.0
    assert config.state_file == tmp_path / "bridge.json"
    assert config.history_table == "history"


def test_env_overrides(tmp_path, monkeypatch):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"retry_interval": 30}))
    monkeypatch.setenv("LWSYNC_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("LWSYNC_RETRY_INTERVAL", "90")
    monkeypatch.setenv("LWSYNC_HISTORY_TABLE", "from-env")

    config = load_config()

    assert config.retry_interval == 90.0
    assert config.history_table == "from-env"


def test_negative_delay_is_rejected(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"retry_interval": -1}))

    with pytest.raises(ValueError):
        load_config(str(config_file))


def test_unknown_kind_is_rejected(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"init_delay": {"thermostat": 1}}))

    with pytest.raises(ValueError):
        load_config(str(config_file))
