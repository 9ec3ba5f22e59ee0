"""Register field rules and register windows.

A :class:`FieldRule` describes where one logical value lives in the
device's register spaces and how its raw words are interpreted.  A
:class:`RegisterWindow` is the immutable result of one contiguous read.

Field kinds:

| Kind          | Words | Raw → value                                   |
|---------------|-------|-----------------------------------------------|
| SCALED        | 1     | ``raw / scale``                               |
| COMBINED_32   | 2     | ``(word[a] << 16 | word[a+1]) / scale``        |
| HIGH_BYTE     | 1     | ``raw >> 8`` (shares the word with a partner) |
| LOW_BYTE      | 1     | ``raw & 0xFF`` (shares the word with a partner) |
| ENUM          | 1     | ``table.get(raw, raw)``                       |

32-bit values are big-endian by word: the high word sits at the lower
address.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from pygrowattspf.constants.scaling import ScaleFactor


class RegisterSpace(StrEnum):
    """Modbus register space a field is read from."""

    HOLDING = "holding"  # FC03 read, FC16 write
    INPUT = "input"  # FC04, read-only


class FieldKind(StrEnum):
    """How raw register words map to a value."""

    SCALED = "scaled"
    COMBINED_32 = "combined_32"
    HIGH_BYTE = "high_byte"
    LOW_BYTE = "low_byte"
    ENUM = "enum"


_PACKED_KINDS = frozenset({FieldKind.HIGH_BYTE, FieldKind.LOW_BYTE})


@dataclass(frozen=True)
class FieldRule:
    """Declarative decode/encode rule for one logical field.

    Attributes:
        name: Field name as seen by callers (e.g. ``startHour1``).
        space: Register space the field lives in.
        address: First register address.
        kind: Decode/encode rule kind.
        scale: Divisor applied to the raw value (SCALED and COMBINED_32).
        word_span: Number of registers covered, 2 only for COMBINED_32.
        table: Code → label table for ENUM fields.
        partner: For HIGH_BYTE/LOW_BYTE, the field packed into the other
            byte of the same word.
        minimum: Lowest allowed value (after scaling), None if unbounded.
        maximum: Highest allowed value (after scaling), None if unbounded.
        unit: Engineering unit string.
        description: Human-readable description.
    """

    name: str
    space: RegisterSpace
    address: int
    kind: FieldKind = FieldKind.SCALED
    scale: ScaleFactor = ScaleFactor.SCALE_NONE
    word_span: int = 1
    table: Mapping[int, str] | None = field(default=None, compare=False, hash=False)
    partner: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    unit: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if self.address < 0:
            raise ValueError(f"{self.name}: address must be non-negative")
        expected_span = 2 if self.kind is FieldKind.COMBINED_32 else 1
        if self.word_span != expected_span:
            raise ValueError(
                f"{self.name}: {self.kind} requires word_span={expected_span}, "
                f"got {self.word_span}"
            )
        if self.kind is FieldKind.ENUM and not self.table:
            raise ValueError(f"{self.name}: enum field requires a table")
        if self.kind in _PACKED_KINDS and not self.partner:
            raise ValueError(f"{self.name}: byte-packed field requires a partner")

    @property
    def end(self) -> int:
        """Address one past the last register covered."""
        return self.address + self.word_span

    @property
    def addresses(self) -> range:
        """All register addresses covered by this field."""
        return range(self.address, self.end)

    @property
    def is_packed(self) -> bool:
        """True if another field shares this field's register word."""
        return self.kind in _PACKED_KINDS

    @property
    def choices(self) -> tuple[str, ...]:
        """Allowed labels for ENUM fields, empty otherwise."""
        if self.table is None:
            return ()
        return tuple(self.table.values())


@dataclass(frozen=True)
class RegisterWindow:
    """Words read from one contiguous address range.

    Immutable once read; consumed by decoding and then discarded.
    """

    space: RegisterSpace
    start: int
    words: tuple[int, ...]

    def __post_init__(self) -> None:
        for word in self.words:
            if not 0 <= word <= 0xFFFF:
                raise ValueError(f"Register word out of 16-bit range: {word}")

    @property
    def count(self) -> int:
        return len(self.words)

    @property
    def end(self) -> int:
        return self.start + len(self.words)

    def covers(self, rule: FieldRule) -> bool:
        """True if every register of ``rule`` lies inside this window."""
        return rule.space is self.space and self.start <= rule.address and rule.end <= self.end

    def words_for(self, rule: FieldRule) -> tuple[int, ...]:
        """Slice out the words belonging to ``rule``.

        Raises:
            ValueError: If the rule is not covered by this window
        """
        if not self.covers(rule):
            raise ValueError(
                f"{rule.name} ({rule.space} {rule.address}+{rule.word_span}) is outside "
                f"window {self.space} {self.start}+{self.count}"
            )
        offset = rule.address - self.start
        return self.words[offset : offset + rule.word_span]


def contiguous_blocks(addresses: set[int] | frozenset[int]) -> list[tuple[int, int]]:
    """Group addresses into sorted ``(start, count)`` runs of consecutive registers."""
    blocks: list[tuple[int, int]] = []
    for address in sorted(addresses):
        if blocks and blocks[-1][0] + blocks[-1][1] == address:
            start, count = blocks[-1]
            blocks[-1] = (start, count + 1)
        else:
            blocks.append((address, 1))
    return blocks


__all__ = [
    "FieldKind",
    "FieldRule",
    "RegisterSpace",
    "RegisterWindow",
    "contiguous_blocks",
]
