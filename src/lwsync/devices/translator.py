"""Conversion between bridge-native feature values and capability values.

The bridge reports switches as 0/1, dim levels as 0-100, power in watts and
energy in Wh. Any negative number is the bridge's "unknown" sentinel and is
never converted. Every ``*_from_raw`` function returns None when there is
nothing to apply.
"""

import math
from typing import Any, Optional

from lwsync.devices.descriptor import FeatureRole

# Host capability names per feature role
CAPABILITY_NAMES: dict[FeatureRole, str] = {
    FeatureRole.SWITCH: "onoff",
    FeatureRole.DIM_LEVEL: "dim",
    FeatureRole.POWER: "measure_power",
    FeatureRole.ENERGY: "meter_power",
}


def _number(raw: Any) -> Optional[float]:
    # bool is an int subclass but never a valid feature value
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    # json.loads accepts NaN and Infinity
    if not math.isfinite(raw):
        return None
    return raw


def switch_from_raw(raw: Any) -> Optional[bool]:
    value = _number(raw)
    if value == 0:
        return False
    if value == 1:
        return True
    return None


def switch_to_raw(on: bool) -> str:
    """The bridge wants the switch value as the string '1' or '0'."""
    return "1" if on else "0"


def dim_from_raw(raw: Any) -> Optional[float]:
    value = _number(raw)
    if value is None or value < 0:
        return None
    return value / 100


def dim_to_raw(fraction: float) -> int:
    """Scale a 0-1 dim fraction to the bridge's 0-100 range. No clamping."""
    return round(fraction * 100)


def power_from_raw(raw: Any) -> Optional[float]:
    value = _number(raw)
    if value is None or value < 0:
        return None
    return value


def energy_from_raw(raw: Any) -> Optional[float]:
    """Bridge energy counters are in Wh, capabilities use kWh."""
    value = _number(raw)
    if value is None or value < 0:
        return None
    return value / 1000


_FROM_RAW = {
    FeatureRole.SWITCH: switch_from_raw,
    FeatureRole.DIM_LEVEL: dim_from_raw,
    FeatureRole.POWER: power_from_raw,
    FeatureRole.ENERGY: energy_from_raw,
}


def from_raw(role: FeatureRole, raw: Any) -> Optional[Any]:
    """Translate a raw value for the given role, or None to skip the update."""
    return _FROM_RAW[role](raw)
