"""Device identity and per-kind capability table."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DeviceKind(str, Enum):
    """Device kinds handled by the sync engine.

    The value is the device type the bridge uses when listing devices.
    """

    DIMMER = "dimmer"
    SOCKET = "socket"


class FeatureRole(str, Enum):
    """Bridge features a device can expose. Values are webhook key suffixes."""

    SWITCH = "switch"
    DIM_LEVEL = "dimLevel"
    POWER = "power"
    ENERGY = "energy"


# Roles each kind may support, in registration order
KIND_ROLES: dict[DeviceKind, tuple[FeatureRole, ...]] = {
    DeviceKind.DIMMER: (
        FeatureRole.SWITCH,
        FeatureRole.DIM_LEVEL,
        FeatureRole.POWER,
        FeatureRole.ENERGY,
    ),
    DeviceKind.SOCKET: (
        FeatureRole.SWITCH,
        FeatureRole.POWER,
        FeatureRole.ENERGY,
    ),
}

# Driver ids used as the first part of webhook keys
DRIVER_IDS: dict[DeviceKind, str] = {
    DeviceKind.DIMMER: "lwdimmer",
    DeviceKind.SOCKET: "lwsockets",
}

WEBHOOK_SCOPE = "feature"


@dataclass(frozen=True)
class DeviceDescriptor:
    """Identity of a paired device. Immutable once created.

    Feature ids are opaque strings assigned by the bridge. ``power`` and
    ``energy`` are optional; ``dim_level`` exists only for dimmers.
    """

    kind: DeviceKind
    external_id: str
    switch: str
    dim_level: Optional[str] = None
    power: Optional[str] = None
    energy: Optional[str] = None
    name: str = ""

    def __post_init__(self):
        if not self.switch:
            raise ValueError(f"Device {self.external_id} has no switch feature")
        if self.kind == DeviceKind.DIMMER and not self.dim_level:
            raise ValueError(f"Dimmer {self.external_id} has no dimLevel feature")
        if self.kind != DeviceKind.DIMMER and self.dim_level:
            raise ValueError(
                f"Only dimmers have a dimLevel feature, got one for {self.kind.value} {self.external_id}"
            )

    @classmethod
    def from_pairing_data(cls, kind: DeviceKind, data: dict[str, Any]) -> "DeviceDescriptor":
        """Build a descriptor from the bridge's pairing dict.

        Accepts either ``{"name": ..., "data": {...}}`` or the inner data dict.
        Feature ids that are not strings are treated as absent.

        Raises:
            ValueError: If required feature ids are missing
        """
        name = data.get("name", "")
        fields = data.get("data", data)

        def _feature(key: str) -> Optional[str]:
            value = fields.get(key)
            return value if isinstance(value, str) else None

        return cls(
            kind=kind,
            external_id=str(fields.get("id", "")),
            switch=_feature("switch"),
            dim_level=_feature("dimLevel") if kind == DeviceKind.DIMMER else None,
            power=_feature("power"),
            energy=_feature("energy"),
            name=name,
        )

    @property
    def driver_id(self) -> str:
        return DRIVER_IDS[self.kind]

    @property
    def device_id(self) -> str:
        """Registry id, also the prefix of every webhook key of this device."""
        return f"{self.driver_id}_{self.external_id}"

    def feature_id(self, role: FeatureRole) -> Optional[str]:
        return {
            FeatureRole.SWITCH: self.switch,
            FeatureRole.DIM_LEVEL: self.dim_level,
            FeatureRole.POWER: self.power,
            FeatureRole.ENERGY: self.energy,
        }[role]

    def supports(self, role: FeatureRole) -> bool:
        return role in KIND_ROLES[self.kind] and self.feature_id(role) is not None

    def supported_roles(self) -> list[FeatureRole]:
        return [role for role in KIND_ROLES[self.kind] if self.feature_id(role) is not None]

    def webhook_key(self, role: FeatureRole) -> str:
        return webhook_key(self.driver_id, self.external_id, role)


def webhook_key(driver_id: str, external_id: str, role: FeatureRole) -> str:
    """Build the key the bridge echoes back with each webhook delivery.

    Format: ``{driverKind}_{externalId}_{featureRole}``, e.g. ``lwdimmer_42_switch``.
    """
    return f"{driver_id}_{external_id}_{FeatureRole(role).value}"


def parse_webhook_key(key: str) -> tuple[str, str, str]:
    """Split a webhook key into (driver_id, external_id, role).

    The role is split off the right and the driver id off the left, so
    external ids may themselves contain underscores.

    Raises:
        ValueError: If the key does not have all three parts
    """
    head, sep, role = key.rpartition("_")
    driver_id, sep2, external_id = head.partition("_")
    if not sep or not sep2 or not driver_id or not external_id or not role:
        raise ValueError(f"Malformed webhook key: {key!r}")
    return driver_id, external_id, role
