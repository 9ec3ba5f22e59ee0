"""Read-only sensor and clock register definitions for Growatt SPF inverters.

Input registers 0-89 carry runtime data.  Power and energy values are
32-bit pairs (high word first) in 0.1 W / 0.1 kWh.

Layout (input registers):
  Reg 0:      Run status code
  Reg 1-2:    PV1/PV2 voltage (V, scale=0.1)
  Reg 3-4:    PV1 power (32-bit)
  Reg 5-6:    PV2 power (32-bit)
  Reg 18:     Battery SOC (%)
  Reg 20:     Grid voltage (V, scale=0.1)
  Reg 25:     Inverter temperature (°C, scale=0.1)
  Reg 36-37:  AC charge (import) power (32-bit)
  Reg 40:     Error code
  Reg 48-55:  PV1/PV2 energy today/total (32-bit pairs)
  Reg 60-67:  Battery discharge and load energy (32-bit pairs)
  Reg 69-70:  Output power (32-bit)
  Reg 73-74:  Battery discharge power (32-bit)
  Reg 77-78:  Battery charge power (32-bit)
  Reg 85-88:  Export energy today/total (32-bit pairs, unverified)

The clock lives in holding registers 45-50 (year, month, day, hour,
minute, second).
"""

from __future__ import annotations

from pygrowattspf.constants.scaling import ScaleFactor
from pygrowattspf.constants.status_codes import INVERTER_ERROR_CODES, INVERTER_STATUS_CODES

from .fields import FieldKind, FieldRule, RegisterSpace

_INPUT = RegisterSpace.INPUT


def _u16(name: str, address: int, scale: ScaleFactor = ScaleFactor.SCALE_NONE, unit: str = "") -> FieldRule:
    return FieldRule(name=name, space=_INPUT, address=address, scale=scale, unit=unit)


def _u32(name: str, address: int, unit: str) -> FieldRule:
    return FieldRule(
        name=name,
        space=_INPUT,
        address=address,
        kind=FieldKind.COMBINED_32,
        word_span=2,
        scale=ScaleFactor.SCALE_10,
        unit=unit,
    )


# Input registers are read as a single 90-word block (max 125 per FC04).
SENSOR_READ_GROUPS: tuple[tuple[int, int], ...] = ((0, 90),)

SPF_SENSOR_FIELDS: tuple[FieldRule, ...] = (
    FieldRule(
        name="inverterStatus",
        space=_INPUT,
        address=0,
        kind=FieldKind.ENUM,
        table=INVERTER_STATUS_CODES,
        description="Run status; unknown codes are reported as numbers.",
    ),
    _u16("vpv1", 1, ScaleFactor.SCALE_10, "V"),
    _u16("vpv2", 2, ScaleFactor.SCALE_10, "V"),
    _u32("ppv1", 3, "W"),
    _u32("ppv2", 5, "W"),
    _u16("soc", 18, unit="%"),
    _u16("vgrid", 20, ScaleFactor.SCALE_10, "V"),
    _u16("inverterTemperature", 25, ScaleFactor.SCALE_10, "°C"),
    _u32("pImport", 36, "W"),
    FieldRule(
        name="inverterError",
        space=_INPUT,
        address=40,
        kind=FieldKind.ENUM,
        table=INVERTER_ERROR_CODES,
        description="Error code; unknown codes are reported as numbers.",
    ),
    _u32("epv1Today", 48, "kWh"),
    _u32("epv1Total", 50, "kWh"),
    _u32("epv2Today", 52, "kWh"),
    _u32("epv2Total", 54, "kWh"),
    # The import counters share registers with PV1 energy on this family.
    _u32("eImportToday", 48, "kWh"),
    _u32("eImportTotal", 50, "kWh"),
    _u32("eDischargeToday", 60, "kWh"),
    _u32("eDischargeTotal", 62, "kWh"),
    _u32("eChargeToday", 60, "kWh"),
    _u32("eChargeTotal", 62, "kWh"),
    _u32("eLoadToday", 64, "kWh"),
    _u32("eLoadTotal", 66, "kWh"),
    _u32("pExport", 69, "W"),
    _u32("pLoad", 69, "W"),
    _u32("pDischarge", 73, "W"),
    _u32("pCharge", 77, "W"),
    _u32("eExportToday", 85, "kWh"),
    _u32("eExportTotal", 87, "kWh"),
)

# Derived sensors: name → source fields summed after decoding.
SPF_DERIVED_SENSORS: dict[str, tuple[str, ...]] = {
    "ppv": ("ppv1", "ppv2"),
    "epvToday": ("epv1Today", "epv2Today"),
    "epvTotal": ("epv1Total", "epv2Total"),
}

CLOCK_FIELDS: tuple[FieldRule, ...] = tuple(
    FieldRule(name=name, space=RegisterSpace.HOLDING, address=45 + offset)
    for offset, name in enumerate(("year", "month", "day", "hour", "minute", "second"))
)


__all__ = [
    "CLOCK_FIELDS",
    "SENSOR_READ_GROUPS",
    "SPF_DERIVED_SENSORS",
    "SPF_SENSOR_FIELDS",
]
