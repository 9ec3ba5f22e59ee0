"""Exception hierarchy for pygrowattspf.

Every error raised by the library derives from :class:`GrowattError` so
callers can use a single ``except GrowattError`` around adapter calls.
Transport failures live in :mod:`pygrowattspf.transports.exceptions`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


class GrowattError(Exception):
    """Base exception for all pygrowattspf errors."""

    pass


class MalformedControlMessageError(GrowattError):
    """Inbound control or command message could not be parsed."""

    def __init__(self, message: str, raw: Any = None) -> None:
        self.raw = raw
        super().__init__(message)


class UnknownCommandError(GrowattError):
    """Dispatcher received a command name it does not recognise."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unknown command: {command!r}")


class UnknownDomainError(GrowattError):
    """Control domain name is not declared by the active profile."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Unknown control domain: {domain!r}")


@dataclass(frozen=True)
class FieldViolation:
    """One field that failed validation."""

    field: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"{self.field}={self.value!r}: {self.reason}"


class ValidationFailedError(GrowattError):
    """Control domain state failed validation; nothing was written.

    Attributes:
        domain: Name of the domain being validated
        violations: Every violated field, not just the first
    """

    def __init__(self, domain: str, violations: Sequence[FieldViolation]) -> None:
        self.domain = domain
        self.violations: tuple[FieldViolation, ...] = tuple(violations)
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Validation failed for {domain}: {details}")

    @property
    def fields(self) -> list[str]:
        """Names of the violated fields, in declaration order."""
        return [v.field for v in self.violations]


class InvalidFieldValueError(ValidationFailedError):
    """Encode was asked for a value its register(s) cannot represent."""

    def __init__(self, field: str, value: Any, reason: str, domain: str = "") -> None:
        super().__init__(domain or field, [FieldViolation(field, value, reason)])


class PartialFlushError(GrowattError):
    """A flush wrote some register blocks before a later block failed.

    The device has no transactional write, so the blocks in ``completed``
    stay written.  Refresh the domain to learn the resulting device state.
    """

    def __init__(
        self,
        domain: str,
        completed: Sequence[tuple[int, int]],
        failed: tuple[int, int],
    ) -> None:
        self.domain = domain
        self.completed: tuple[tuple[int, int], ...] = tuple(completed)
        self.failed = failed
        super().__init__(
            f"Flush of {domain} failed at block {failed[0]}+{failed[1]} after "
            f"{len(self.completed)} block(s) were written; device state is mixed"
        )


__all__ = [
    "FieldViolation",
    "GrowattError",
    "InvalidFieldValueError",
    "MalformedControlMessageError",
    "PartialFlushError",
    "UnknownCommandError",
    "UnknownDomainError",
    "ValidationFailedError",
]
