"""Device profiles: firmware-specific holding register layouts.

The same SPF inverter family ships three different layouts for its
time-of-use (TOU) control registers.  Each layout is a :class:`DeviceProfile`
value; the adapter is constructed with one and never hard-codes addresses.

| Profile  | Hour/minute            | Percentages | Windows | Bank   |
|----------|------------------------|-------------|---------|--------|
| packed   | hour<<8 | minute word  | whole %     | 1       | 34-44  |
| scaled   | separate words         | 0.1 %       | 1       | 90-106 |
| extended | hour<<8 | minute word  | whole %     | 3       | 1070+  |

Extended layout (holding registers):
  1070-1071: dischargePower, dischargeStopSOC
  1080-1088: discharge windows 1-3 (start word, stop word, enable)
  1090-1092: chargePower, stopSOC, ac
  1100-1108: charge windows 1-3 (start word, stop word, enable)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pygrowattspf.constants.scaling import ScaleFactor
from pygrowattspf.constants.status_codes import SWITCH_OFF, SWITCH_STATES
from pygrowattspf.exceptions import UnknownDomainError

from .fields import FieldKind, FieldRule, RegisterSpace, contiguous_blocks
from .sensors import CLOCK_FIELDS, SENSOR_READ_GROUPS, SPF_DERIVED_SENSORS, SPF_SENSOR_FIELDS

TOU_CHARGING = "touCharging"
TOU_DISCHARGING = "touDischarging"

_HOLDING = RegisterSpace.HOLDING


class ProfileName(StrEnum):
    """Register layout revision, selected from configuration."""

    PACKED = "packed"
    SCALED = "scaled"
    EXTENDED = "extended"


@dataclass(frozen=True)
class ControlDomain:
    """A named group of holding-register fields written together.

    Attributes:
        name: Domain name (e.g. ``touCharging``).
        fields: Field rules in declaration order.
        defaults: Seed values used before the device is first read.
    """

    name: str
    fields: tuple[FieldRule, ...]
    defaults: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        by_name: dict[str, FieldRule] = {}
        for rule in self.fields:
            if rule.space is not _HOLDING:
                raise ValueError(f"{self.name}.{rule.name}: control fields must be holding")
            if rule.name in by_name:
                raise ValueError(f"{self.name}: duplicate field {rule.name}")
            by_name[rule.name] = rule

        missing = set(by_name) - set(self.defaults)
        if missing:
            raise ValueError(f"{self.name}: no default for {sorted(missing)}")

        for rule in self.fields:
            if rule.is_packed:
                partner = by_name.get(rule.partner or "")
                if (
                    partner is None
                    or partner.partner != rule.name
                    or partner.address != rule.address
                    or partner.kind is rule.kind
                ):
                    raise ValueError(f"{self.name}.{rule.name}: invalid packed partner")

        # Fields may share registers only as identical, byte-packed words.
        owners: dict[int, FieldRule] = {}
        for rule in self.fields:
            for address in rule.addresses:
                other = owners.setdefault(address, rule)
                if other is not rule and other.partner != rule.name:
                    raise ValueError(
                        f"{self.name}: {rule.name} aliases {other.name} at register {address}"
                    )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self.fields)

    def rule(self, name: str) -> FieldRule:
        """Get a field rule by name.

        Raises:
            KeyError: If the field is not part of this domain
        """
        for rule in self.fields:
            if rule.name == name:
                return rule
        raise KeyError(name)

    @property
    def blocks(self) -> list[tuple[int, int]]:
        """Contiguous ``(start, count)`` register blocks, in address order."""
        return contiguous_blocks({a for rule in self.fields for a in rule.addresses})


@dataclass(frozen=True)
class DeviceProfile:
    """Complete register map for one firmware layout.

    Attributes:
        name: Profile identifier.
        description: Human-readable summary.
        sensors: Read-only input-register fields.
        derived_sensors: Sensor name → source sensors summed after decode.
        sensor_groups: ``(start, count)`` input blocks covering all sensors.
        clock: Holding-register clock fields, read-only.
        domains: Writable control domains.
    """

    name: ProfileName
    description: str
    sensors: tuple[FieldRule, ...]
    domains: tuple[ControlDomain, ...]
    derived_sensors: Mapping[str, tuple[str, ...]] = field(
        default_factory=dict, compare=False, hash=False
    )
    sensor_groups: tuple[tuple[int, int], ...] = SENSOR_READ_GROUPS
    clock: tuple[FieldRule, ...] = CLOCK_FIELDS

    @property
    def domain_names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.domains)

    def domain(self, name: str) -> ControlDomain:
        """Get a control domain by name.

        Raises:
            UnknownDomainError: If the profile has no such domain
        """
        for domain in self.domains:
            if domain.name == name:
                return domain
        raise UnknownDomainError(name)


# =============================================================================
# Field builders
# =============================================================================


def _number(
    name: str,
    address: int,
    *,
    minimum: float,
    maximum: float,
    scale: ScaleFactor = ScaleFactor.SCALE_NONE,
    unit: str = "",
) -> FieldRule:
    return FieldRule(
        name=name,
        space=_HOLDING,
        address=address,
        scale=scale,
        minimum=minimum,
        maximum=maximum,
        unit=unit,
    )


def _switch(name: str, address: int) -> FieldRule:
    return FieldRule(
        name=name,
        space=_HOLDING,
        address=address,
        kind=FieldKind.ENUM,
        table=SWITCH_STATES,
    )


def _packed_time(hour: str, minute: str, address: int) -> tuple[FieldRule, FieldRule]:
    """Hour in the high byte, minute in the low byte of one word."""
    return (
        FieldRule(
            name=hour,
            space=_HOLDING,
            address=address,
            kind=FieldKind.HIGH_BYTE,
            partner=minute,
            minimum=0,
            maximum=23,
        ),
        FieldRule(
            name=minute,
            space=_HOLDING,
            address=address,
            kind=FieldKind.LOW_BYTE,
            partner=hour,
            minimum=0,
            maximum=59,
        ),
    )


def _packed_window(period: int, address: int) -> tuple[FieldRule, ...]:
    """Start word, stop word, enable word."""
    return (
        *_packed_time(f"startHour{period}", f"startMinute{period}", address),
        *_packed_time(f"stopHour{period}", f"stopMinute{period}", address + 1),
        _switch(f"enablePeriod{period}", address + 2),
    )


def _unpacked_window(period: int, address: int) -> tuple[FieldRule, ...]:
    """Start hour, start minute, stop hour, stop minute, enable: one word each."""
    return (
        _number(f"startHour{period}", address, minimum=0, maximum=23),
        _number(f"startMinute{period}", address + 1, minimum=0, maximum=59),
        _number(f"stopHour{period}", address + 2, minimum=0, maximum=23),
        _number(f"stopMinute{period}", address + 3, minimum=0, maximum=59),
        _switch(f"enablePeriod{period}", address + 4),
    )


def _window_defaults(periods: int) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for period in range(1, periods + 1):
        defaults.update(
            {
                f"startHour{period}": 0,
                f"startMinute{period}": 0,
                f"stopHour{period}": 0,
                f"stopMinute{period}": 0,
                f"enablePeriod{period}": SWITCH_OFF,
            }
        )
    return defaults


# =============================================================================
# PACKED PROFILE (16-bit granularity, single window)
# =============================================================================
#   34-36: chargePower, stopSOC, ac
#   37-39: charge window (start word, stop word, enable)
#   40-41: dischargePower, dischargeStopSOC
#   42-44: discharge window (start word, stop word, enable)

PACKED_PROFILE = DeviceProfile(
    name=ProfileName.PACKED,
    description="16-bit layout: packed hour/minute words, whole-percent fields",
    sensors=SPF_SENSOR_FIELDS,
    derived_sensors=SPF_DERIVED_SENSORS,
    domains=(
        ControlDomain(
            name=TOU_CHARGING,
            fields=(
                _number("chargePower", 34, minimum=0, maximum=100, unit="%"),
                _number("stopSOC", 35, minimum=0, maximum=100, unit="%"),
                _switch("ac", 36),
                *_packed_window(1, 37),
            ),
            defaults={"chargePower": 100, "stopSOC": 100, "ac": SWITCH_OFF, **_window_defaults(1)},
        ),
        ControlDomain(
            name=TOU_DISCHARGING,
            fields=(
                _number("dischargePower", 40, minimum=0, maximum=100, unit="%"),
                _number("dischargeStopSOC", 41, minimum=0, maximum=100, unit="%"),
                *_packed_window(1, 42),
            ),
            defaults={"dischargePower": 100, "dischargeStopSOC": 5, **_window_defaults(1)},
        ),
    ),
)

# =============================================================================
# SCALED PROFILE (0.1-unit percentages, unpacked hour/minute)
# =============================================================================
#   90-92:   chargePower (0.1%), stopSOC (0.1%), ac
#   93-97:   charge window (start h, start m, stop h, stop m, enable)
#   100-101: dischargePower (0.1%), dischargeStopSOC (0.1%, floor 10%)
#   102-106: discharge window
#
# dischargeStopSOC is derived from the battery cut-off voltage on this
# firmware and refuses values below 10%.

SCALED_PROFILE = DeviceProfile(
    name=ProfileName.SCALED,
    description="0.1-unit layout: scaled percentages, separate hour and minute words",
    sensors=SPF_SENSOR_FIELDS,
    derived_sensors=SPF_DERIVED_SENSORS,
    domains=(
        ControlDomain(
            name=TOU_CHARGING,
            fields=(
                _number("chargePower", 90, minimum=0, maximum=100, scale=ScaleFactor.SCALE_10, unit="%"),
                _number("stopSOC", 91, minimum=0, maximum=100, scale=ScaleFactor.SCALE_10, unit="%"),
                _switch("ac", 92),
                *_unpacked_window(1, 93),
            ),
            defaults={"chargePower": 100.0, "stopSOC": 100.0, "ac": SWITCH_OFF, **_window_defaults(1)},
        ),
        ControlDomain(
            name=TOU_DISCHARGING,
            fields=(
                _number("dischargePower", 100, minimum=0, maximum=100, scale=ScaleFactor.SCALE_10, unit="%"),
                _number("dischargeStopSOC", 101, minimum=10, maximum=100, scale=ScaleFactor.SCALE_10, unit="%"),
                *_unpacked_window(1, 102),
            ),
            defaults={"dischargePower": 100.0, "dischargeStopSOC": 10.0, **_window_defaults(1)},
        ),
    ),
)

# =============================================================================
# EXTENDED PROFILE (three windows per domain, bank 1070+)
# =============================================================================
# Each window boundary is one packed hour<<8 | minute word, as the device
# stores it in this bank; hour and minute are not separate registers here.

EXTENDED_PROFILE = DeviceProfile(
    name=ProfileName.EXTENDED,
    description="Extended schedule: three enabled windows per domain at holding 1070+",
    sensors=SPF_SENSOR_FIELDS,
    derived_sensors=SPF_DERIVED_SENSORS,
    domains=(
        ControlDomain(
            name=TOU_CHARGING,
            fields=(
                _number("chargePower", 1090, minimum=0, maximum=100, unit="%"),
                _number("stopSOC", 1091, minimum=0, maximum=100, unit="%"),
                _switch("ac", 1092),
                *_packed_window(1, 1100),
                *_packed_window(2, 1103),
                *_packed_window(3, 1106),
            ),
            defaults={"chargePower": 100, "stopSOC": 100, "ac": SWITCH_OFF, **_window_defaults(3)},
        ),
        ControlDomain(
            name=TOU_DISCHARGING,
            fields=(
                _number("dischargePower", 1070, minimum=0, maximum=100, unit="%"),
                _number("dischargeStopSOC", 1071, minimum=0, maximum=100, unit="%"),
                *_packed_window(1, 1080),
                *_packed_window(2, 1083),
                *_packed_window(3, 1086),
            ),
            defaults={"dischargePower": 100, "dischargeStopSOC": 5, **_window_defaults(3)},
        ),
    ),
)


# =============================================================================
# PROFILE LOOKUP
# =============================================================================

PROFILES: dict[ProfileName, DeviceProfile] = {
    ProfileName.PACKED: PACKED_PROFILE,
    ProfileName.SCALED: SCALED_PROFILE,
    ProfileName.EXTENDED: EXTENDED_PROFILE,
}


def get_profile(name: ProfileName | str) -> DeviceProfile:
    """Get the device profile for a layout name.

    Args:
        name: ProfileName or its string value

    Raises:
        ValueError: If the name is not a known profile
    """
    return PROFILES[ProfileName(name)]


__all__ = [
    "EXTENDED_PROFILE",
    "PACKED_PROFILE",
    "PROFILES",
    "SCALED_PROFILE",
    "TOU_CHARGING",
    "TOU_DISCHARGING",
    "ControlDomain",
    "DeviceProfile",
    "ProfileName",
    "get_profile",
]
