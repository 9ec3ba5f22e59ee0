"""In-memory store for the writable control domains.

Each domain of the active profile has one cached state, seeded from the
profile defaults and owned exclusively by the store:

    DEFAULT --refresh/merge--> CACHED --flush--> FLUSHED --refresh/merge--> CACHED

- ``merge`` overlays a partial update (unknown keys are ignored).
- ``refresh`` reads the domain's registers and overwrites the cache.
- ``flush`` validates the cache, encodes every field and writes the
  domain's register blocks in address order.

``flush`` works on a copy of the cache taken when it starts, so a
concurrent ``merge`` or ``refresh`` never changes the words being written
(last writer wins on the cache).  Byte-packed words are always rebuilt
from the full domain state, never from one changed sub-field.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pygrowattspf.exceptions import (
    InvalidFieldValueError,
    MalformedControlMessageError,
    PartialFlushError,
)
from pygrowattspf.registers.codec import decode_all, encode_words
from pygrowattspf.registers.fields import RegisterSpace, RegisterWindow
from pygrowattspf.registers.profiles import ControlDomain, DeviceProfile
from pygrowattspf.transports.arbiter import TransportArbiter
from pygrowattspf.validation import validate_domain

_LOGGER = logging.getLogger(__name__)

_CONTROL_MESSAGE = TypeAdapter(dict[str, Any])


class DomainPhase(StrEnum):
    """Lifecycle of one cached domain."""

    DEFAULT = "default"  # seed values, device never contacted
    CACHED = "cached"  # read from device or locally merged
    FLUSHED = "flushed"  # last flush wrote exactly the cached values


@dataclass
class DomainState:
    """Cached values of one domain and where they came from."""

    values: dict[str, Any]
    phase: DomainPhase = DomainPhase.DEFAULT


def parse_control_message(raw: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
    """Parse an inbound partial update into a field → value mapping.

    Strings are JSON; single quotes are accepted in place of double quotes
    because message-bus UIs commonly send ``{'stopSOC': 80}``.

    Raises:
        MalformedControlMessageError: If the input is not a JSON object or
            a mapping with string keys
    """
    try:
        if isinstance(raw, (str, bytes)):
            text = raw.decode() if isinstance(raw, bytes) else raw
            return _CONTROL_MESSAGE.validate_json(text.replace("'", '"'))
        return _CONTROL_MESSAGE.validate_python(raw)
    except (ValidationError, UnicodeDecodeError) as err:
        raise MalformedControlMessageError(
            f"Control message is not a field/value mapping: {err}", raw
        ) from err


class ControlStateStore:
    """Cached state of every control domain of one adapter.

    Example:
        store = ControlStateStore(profile, arbiter)
        store.merge("touDischarging", {"dischargeStopSOC": 20})
        await store.flush("touDischarging")
    """

    def __init__(self, profile: DeviceProfile, arbiter: TransportArbiter) -> None:
        self._profile = profile
        self._arbiter = arbiter
        self._states: dict[str, DomainState] = {
            domain.name: DomainState(values=dict(domain.defaults)) for domain in profile.domains
        }

    @property
    def profile(self) -> DeviceProfile:
        return self._profile

    def _domain(self, name: str) -> tuple[ControlDomain, DomainState]:
        domain = self._profile.domain(name)
        return domain, self._states[domain.name]

    def phase(self, domain: str) -> DomainPhase:
        """Get the lifecycle phase of a domain."""
        return self._domain(domain)[1].phase

    def snapshot(self, domain: str) -> dict[str, Any]:
        """Return a copy of a domain's cached values."""
        return dict(self._domain(domain)[1].values)

    def snapshot_all(self) -> dict[str, dict[str, Any]]:
        """Return copies of every domain's cached values."""
        return {name: dict(state.values) for name, state in self._states.items()}

    # ------------------------------------------------------------------
    # Local operations
    # ------------------------------------------------------------------

    def merge(self, domain: str, update: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
        """Overlay a partial update onto a domain's cache.

        Keys that are not fields of the domain are ignored.  The cache is
        left untouched if the update cannot be parsed.

        Args:
            domain: Domain name
            update: Mapping or JSON object text

        Returns:
            The domain's full state after the merge

        Raises:
            UnknownDomainError: If the domain is not in the profile
            MalformedControlMessageError: If the update is not a mapping
        """
        control, state = self._domain(domain)
        try:
            parsed = parse_control_message(update)
        except MalformedControlMessageError:
            _LOGGER.warning("Ignoring malformed control message for %s", control.name)
            raise

        known = set(control.field_names)
        ignored = sorted(key for key in parsed if key not in known)
        if ignored:
            _LOGGER.debug("Ignoring unknown %s fields: %s", control.name, ", ".join(ignored))

        changes = {key: value for key, value in parsed.items() if key in known}
        if changes:
            state.values.update(changes)
            state.phase = DomainPhase.CACHED
        return dict(state.values)

    def validate(self, domain: str) -> None:
        """Validate a domain's cached values.

        Raises:
            ValidationFailedError: Listing every violated field
        """
        control, state = self._domain(domain)
        validate_domain(control, state.values)

    # ------------------------------------------------------------------
    # Device operations
    # ------------------------------------------------------------------

    async def refresh(self, domain: str) -> dict[str, Any]:
        """Read a domain from the device and overwrite its cache.

        The cache is only replaced once every block has been read.

        Returns:
            The domain's full state as read

        Raises:
            TransportError: If any read fails
        """
        control, state = self._domain(domain)
        windows: list[RegisterWindow] = []
        for start, count in control.blocks:
            windows.append(await self._arbiter.read_window(RegisterSpace.HOLDING, start, count))

        state.values = decode_all(windows, control.fields)
        state.phase = DomainPhase.CACHED
        _LOGGER.debug("Refreshed %s: %s", control.name, state.values)
        return dict(state.values)

    async def flush(self, domain: str) -> dict[str, Any]:
        """Validate, encode and write a domain to the device.

        Blocks are written in address order.  The first failing block aborts
        the flush; earlier blocks are not rolled back.

        Returns:
            The values that were written

        Raises:
            ValidationFailedError: If validation fails (nothing written)
            InvalidFieldValueError: If a value cannot be encoded (nothing written)
            PartialFlushError: If a block failed after earlier blocks succeeded
            TransportError: If the first block failed
        """
        control, state = self._domain(domain)
        snapshot = dict(state.values)

        validate_domain(control, snapshot)
        try:
            words = encode_words(snapshot, control.fields)
        except InvalidFieldValueError as err:
            violation = err.violations[0]
            raise InvalidFieldValueError(
                violation.field, violation.value, violation.reason, domain=control.name
            ) from err

        completed: list[tuple[int, int]] = []
        for start, count in control.blocks:
            try:
                await self._arbiter.write_multiple(
                    start, [words[address] for address in range(start, start + count)]
                )
            except Exception as err:
                if not completed:
                    raise
                _LOGGER.error(
                    "Flush of %s failed at register %d after writing %d block(s): %s",
                    control.name,
                    start,
                    len(completed),
                    err,
                )
                raise PartialFlushError(control.name, completed, (start, count)) from err
            completed.append((start, count))

        if state.values == snapshot:
            state.phase = DomainPhase.FLUSHED
        _LOGGER.info("Wrote %s to %d register block(s)", control.name, len(completed))
        return snapshot


__all__ = [
    "ControlStateStore",
    "DomainPhase",
    "DomainState",
    "parse_control_message",
]
