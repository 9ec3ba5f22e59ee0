"""Constant tables shared by the register maps."""

from pygrowattspf.constants.scaling import ScaleFactor
from pygrowattspf.constants.status_codes import (
    INVERTER_ERROR_CODES,
    INVERTER_STATUS_CODES,
    SWITCH_STATES,
)

__all__ = [
    "INVERTER_ERROR_CODES",
    "INVERTER_STATUS_CODES",
    "SWITCH_STATES",
    "ScaleFactor",
]
