"""Scale factors applied to raw register words.

The divisor is a per-field property of the register map.  Firmware revisions
of the same inverter disagree on it (percentages are whole units on some and
tenths on others), so it is never assumed globally.
"""

from __future__ import annotations

from enum import Enum


class ScaleFactor(int, Enum):
    """Divisor applied to raw register value."""

    SCALE_NONE = 1
    SCALE_10 = 10


def apply_scale(raw: int, scale: ScaleFactor) -> int | float:
    """Scale a raw integer to engineering units.

    Unscaled values stay ``int`` so whole-unit fields (hours, percentages on
    older firmware) keep their integer type.
    """
    if scale is ScaleFactor.SCALE_NONE:
        return raw
    return raw / scale.value


def remove_scale(value: float, scale: ScaleFactor) -> int | None:
    """Convert an engineering value back to a raw integer.

    Returns:
        The raw integer, or None if the value is not an exact multiple of
        the field resolution (e.g. 12.34 on a 0.1-unit field).
    """
    scaled = value * scale.value
    raw = round(scaled)
    if abs(scaled - raw) > 1e-6:
        return None
    return raw


__all__ = ["ScaleFactor", "apply_scale", "remove_scale"]
