"""Pure decode/encode functions between register words and field values.

No I/O and no state.  Decoding never fails: an unknown enumerated code
degrades to its raw number.  Encoding raises
:class:`~pygrowattspf.exceptions.InvalidFieldValueError` for any value outside
the field's declared range or that its register(s) cannot hold, so callers
can encode a whole domain before issuing a single write.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from pygrowattspf.constants.scaling import apply_scale, remove_scale
from pygrowattspf.exceptions import InvalidFieldValueError

from .fields import FieldKind, FieldRule, RegisterWindow

WORD_MAX = 0xFFFF
BYTE_MAX = 0xFF
DWORD_MAX = 0xFFFFFFFF


def combine_words(high: int, low: int) -> int:
    """Combine two words, high word first, into one 32-bit integer."""
    return (high << 16) | low


def split_dword(value: int) -> tuple[int, int]:
    """Split a 32-bit integer into ``(high, low)`` words."""
    return (value >> 16) & WORD_MAX, value & WORD_MAX


def pack_bytes(high: int, low: int) -> int:
    """Pack two byte-sized values into one word (e.g. hour<<8 | minute)."""
    return (high << 8) | low


def unpack_bytes(word: int) -> tuple[int, int]:
    """Split one word into ``(high_byte, low_byte)``."""
    return word >> 8, word & BYTE_MAX


# ============================================================================
# Decoding
# ============================================================================


def decode_words(words: Sequence[int], rule: FieldRule) -> int | float | str:
    """Decode the raw words that belong to ``rule``.

    Args:
        words: Exactly ``rule.word_span`` register words, lowest address first
        rule: Field rule describing the interpretation

    Returns:
        The decoded value.  ENUM fields return their label, or the raw code
        if the table does not know it.
    """
    if len(words) != rule.word_span:
        raise ValueError(f"{rule.name} expects {rule.word_span} word(s), got {len(words)}")

    raw = words[0]
    if rule.kind is FieldKind.COMBINED_32:
        return apply_scale(combine_words(words[0], words[1]), rule.scale)
    if rule.kind is FieldKind.HIGH_BYTE:
        return unpack_bytes(raw)[0]
    if rule.kind is FieldKind.LOW_BYTE:
        return unpack_bytes(raw)[1]
    if rule.kind is FieldKind.ENUM:
        assert rule.table is not None
        return rule.table.get(raw, raw)
    return apply_scale(raw, rule.scale)


def decode(window: RegisterWindow, rule: FieldRule) -> int | float | str:
    """Decode ``rule`` from a register window that covers it."""
    return decode_words(window.words_for(rule), rule)


def decode_all(
    windows: Sequence[RegisterWindow],
    rules: Sequence[FieldRule],
) -> dict[str, int | float | str]:
    """Decode every rule from whichever window covers it.

    Raises:
        ValueError: If a rule is not covered by any window
    """
    values: dict[str, int | float | str] = {}
    for rule in rules:
        window = next((w for w in windows if w.covers(rule)), None)
        if window is None:
            raise ValueError(f"No register window covers field {rule.name}")
        values[rule.name] = decode(window, rule)
    return values


# ============================================================================
# Encoding
# ============================================================================


def _raw_number(
    rule: FieldRule,
    value: Any,
    limit: int,
    *,
    name: str | None = None,
    bounded: bool = True,
) -> int:
    """Convert a numeric field value to its unsigned raw integer.

    ``bounded`` also enforces the rule's declared minimum/maximum, which
    are in engineering units.
    """
    field_name = name or rule.name
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidFieldValueError(field_name, value, "not a number")
    if not math.isfinite(value):
        raise InvalidFieldValueError(field_name, value, "not a finite number")
    if bounded:
        if rule.minimum is not None and value < rule.minimum:
            raise InvalidFieldValueError(field_name, value, f"below minimum {rule.minimum:g}")
        if rule.maximum is not None and value > rule.maximum:
            raise InvalidFieldValueError(field_name, value, f"above maximum {rule.maximum:g}")
    raw = remove_scale(value, rule.scale)
    if raw is None:
        raise InvalidFieldValueError(
            field_name, value, f"not a multiple of 1/{rule.scale.value}"
        )
    if not 0 <= raw <= limit:
        raise InvalidFieldValueError(
            field_name, value, f"raw value {raw} outside 0..{limit}"
        )
    return raw


def _lookup(state: Mapping[str, Any], name: str) -> Any:
    try:
        return state[name]
    except KeyError:
        raise InvalidFieldValueError(name, None, "missing") from None


def _partner_byte(state: Mapping[str, Any], rule: FieldRule, partner_rule: FieldRule | None) -> int:
    assert rule.partner is not None
    value = _lookup(state, rule.partner)
    if partner_rule is not None:
        return _raw_number(partner_rule, value, BYTE_MAX)
    # Without the partner's rule only the byte itself can be checked.
    return _raw_number(rule, value, BYTE_MAX, name=rule.partner, bounded=False)


def encode(
    state: Mapping[str, Any],
    rule: FieldRule,
    partner_rule: FieldRule | None = None,
) -> tuple[int, ...]:
    """Encode ``rule`` into its register word(s) from a full domain state.

    Byte-packed fields rebuild the whole word from both sub-fields in
    ``state``, so an unchanged partner keeps its cached value.

    Args:
        state: Complete domain state (field name → value)
        rule: Field rule to encode
        partner_rule: Rule of the packed partner, used to range-check the
            partner's value as well

    Returns:
        ``rule.word_span`` words, lowest address first

    Raises:
        InvalidFieldValueError: If the value (or a packed partner) is
            missing, not finite, outside the declared range or cannot be
            represented
    """
    value = _lookup(state, rule.name)

    if rule.kind is FieldKind.COMBINED_32:
        return split_dword(_raw_number(rule, value, DWORD_MAX))

    if rule.kind in (FieldKind.HIGH_BYTE, FieldKind.LOW_BYTE):
        own = _raw_number(rule, value, BYTE_MAX)
        other = _partner_byte(state, rule, partner_rule)
        if rule.kind is FieldKind.HIGH_BYTE:
            return (pack_bytes(own, other),)
        return (pack_bytes(other, own),)

    if rule.kind is FieldKind.ENUM:
        assert rule.table is not None
        for code, label in rule.table.items():
            if value == label:
                return (code,)
        # Unknown labels are rejected; raw codes pass through as decode does.
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= WORD_MAX:
            return (value,)
        raise InvalidFieldValueError(
            rule.name, value, f"not one of {', '.join(rule.choices)}"
        )

    return (_raw_number(rule, value, WORD_MAX),)


def encode_words(state: Mapping[str, Any], rules: Sequence[FieldRule]) -> dict[int, int]:
    """Encode every rule and return an ``address → word`` map.

    Raises:
        InvalidFieldValueError: On the first unrepresentable value
        ValueError: If two rules disagree on the contents of a shared word
    """
    by_name = {rule.name: rule for rule in rules}
    words: dict[int, int] = {}
    for rule in rules:
        partner_rule = by_name.get(rule.partner) if rule.partner else None
        for address, word in zip(rule.addresses, encode(state, rule, partner_rule), strict=True):
            if words.get(address, word) != word:
                raise ValueError(f"Conflicting encodings for register {address}")
            words[address] = word
    return words


__all__ = [
    "combine_words",
    "decode",
    "decode_all",
    "decode_words",
    "encode",
    "encode_words",
    "pack_bytes",
    "split_dword",
    "unpack_bytes",
]
