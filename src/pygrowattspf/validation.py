"""Control domain validation.

Checks a complete domain state against the field rules of its profile
before anything is encoded or written.  Validation fails closed: every
missing field and every out-of-range or out-of-enumeration value is
collected, and :class:`~pygrowattspf.exceptions.ValidationFailedError`
reports them all together.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pygrowattspf.constants.scaling import remove_scale
from pygrowattspf.exceptions import FieldViolation, ValidationFailedError
from pygrowattspf.registers.fields import FieldKind, FieldRule
from pygrowattspf.registers.profiles import ControlDomain

_LOGGER = logging.getLogger(__name__)


def check_field(rule: FieldRule, value: Any) -> str | None:
    """Check one value against its rule.

    Returns:
        A reason string if the value is invalid, None if it is acceptable.
    """
    if rule.kind is FieldKind.ENUM:
        if value not in rule.choices:
            return f"must be one of {', '.join(rule.choices)}"
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "not a number"
    if not math.isfinite(value):
        return "not a finite number"
    if rule.minimum is not None and value < rule.minimum:
        return f"below minimum {rule.minimum:g}"
    if rule.maximum is not None and value > rule.maximum:
        return f"above maximum {rule.maximum:g}"
    if remove_scale(value, rule.scale) is None:
        return f"finer than register resolution 1/{rule.scale.value}"
    return None


def find_violations(domain: ControlDomain, values: Mapping[str, Any]) -> list[FieldViolation]:
    """Collect every violation in ``values``, in field declaration order."""
    violations: list[FieldViolation] = []
    for rule in domain.fields:
        if rule.name not in values:
            violations.append(FieldViolation(rule.name, None, "missing"))
            continue
        reason = check_field(rule, values[rule.name])
        if reason is not None:
            violations.append(FieldViolation(rule.name, values[rule.name], reason))
    return violations


def validate_domain(domain: ControlDomain, values: Mapping[str, Any]) -> None:
    """Validate a complete domain state.

    Raises:
        ValidationFailedError: Listing every violated field
    """
    violations = find_violations(domain, values)
    if violations:
        _LOGGER.warning(
            "Validation of %s failed for %d field(s): %s",
            domain.name,
            len(violations),
            ", ".join(v.field for v in violations),
        )
        raise ValidationFailedError(domain.name, violations)


__all__ = ["check_field", "find_violations", "validate_domain"]
