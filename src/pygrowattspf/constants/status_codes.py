"""Status and error code catalogs for Growatt SPF inverters.

Both catalogs are ENUMERATED values: the register holds a single integer
that maps to exactly one condition.  Source registers: Input 0 (status)
and Input 40 (error).

Devices may report codes newer than these tables.  Decoding passes such
codes through as their raw number instead of failing.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Inverter run status - Input register 0
# ---------------------------------------------------------------------------
INVERTER_STATUS_CODES: dict[int, str] = {
    0: "Standby",
    1: "PV an Grid Combine Discharge",
    2: "Discharge",
    3: "Fault",
    4: "Flash",
    5: "PV charge",
    6: "AC charge",
    7: "Combine charge",
    8: "Combine charge and Bypass",
    9: "PV charge and Bypass",
    10: "AC charge and Bypass",
    11: "Bypass",
    12: "PV charge and Discharge",
}

# ---------------------------------------------------------------------------
# Inverter error code - Input register 40
# ---------------------------------------------------------------------------
INVERTER_ERROR_CODES: dict[int, str] = {
    2: "Over Temperature",
    3: "Bat Voltage High",
    5: "Output short",
    6: "Output voltage high",
    7: "Over Load",
    8: "Bus voltage high",
    9: "Bus start fail",
    51: "over current",
    52: "Bus voltage low",
    53: "inverter softstart fail",
    56: "battery open",
    58: "output voltage low",
    60: "negtive power",
    61: "PV voltage high",
    62: "SCI com error",
    80: "can fault",
    81: "host loss",
}

# ---------------------------------------------------------------------------
# Enable/disable flag words used by every control domain
# ---------------------------------------------------------------------------
SWITCH_OFF = "OFF"
SWITCH_ON = "ON"

SWITCH_STATES: dict[int, str] = {
    0: SWITCH_OFF,
    1: SWITCH_ON,
}


__all__ = [
    "INVERTER_ERROR_CODES",
    "INVERTER_STATUS_CODES",
    "SWITCH_OFF",
    "SWITCH_ON",
    "SWITCH_STATES",
]
