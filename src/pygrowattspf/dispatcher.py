"""Named command surface over the control store.

Commands are derived from the profile's domains: each domain ``touCharging``
gets ``getTouCharging`` (refresh and return) and ``setTouCharging`` (flush
the current cache).  ``getTime`` reads the inverter clock.

Inbound command messages use the wire form ``{"command": "getTime"}``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from pygrowattspf.control import ControlStateStore, DomainPhase
from pygrowattspf.exceptions import MalformedControlMessageError, UnknownCommandError
from pygrowattspf.registers.codec import decode_all
from pygrowattspf.registers.fields import contiguous_blocks
from pygrowattspf.transports.arbiter import TransportArbiter

_LOGGER = logging.getLogger(__name__)

TIME_DOMAIN = "time"
GET_TIME = "getTime"


class Operation(StrEnum):
    """What a command does to its domain."""

    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class CommandEnvelope:
    """Result of one dispatched command.

    Attributes:
        command: Command name as received
        domain: Domain the command acted on (``time`` for the clock read)
        operation: GET or SET
        values: For GET, the values read.  For SET, the domain state that
            was written.
    """

    command: str
    domain: str
    operation: Operation
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def payload(self) -> dict[str, Any] | None:
        """Values to publish, or None for SET commands (nothing to report)."""
        if self.operation is Operation.SET:
            return None
        return self.values


class CommandMessage(BaseModel):
    """Inbound command message."""

    model_config = ConfigDict(extra="ignore")

    command: str


def command_name(operation: Operation, domain: str) -> str:
    """Build a command name, e.g. ``(GET, "touCharging") -> "getTouCharging"``."""
    return f"{operation.value}{domain[:1].upper()}{domain[1:]}"


class CommandDispatcher:
    """Routes command names to store and clock operations.

    Example:
        dispatcher = CommandDispatcher(store, arbiter)
        envelope = await dispatcher.dispatch("getTouCharging")
        print(envelope.values["stopSOC"])
    """

    def __init__(self, store: ControlStateStore, arbiter: TransportArbiter) -> None:
        self._store = store
        self._arbiter = arbiter
        self._routes: dict[str, tuple[str, Operation]] = {GET_TIME: (TIME_DOMAIN, Operation.GET)}
        for domain in store.profile.domain_names:
            for operation in Operation:
                self._routes[command_name(operation, domain)] = (domain, operation)

    @property
    def commands(self) -> list[str]:
        """All recognised command names."""
        return sorted(self._routes)

    async def dispatch(self, command: str) -> CommandEnvelope:
        """Run one named command.

        Raises:
            UnknownCommandError: If the name is not recognised; no domain
                cache is touched
            ValidationFailedError: If a SET command's domain is invalid
            TransportError: If the device could not be read or written
        """
        route = self._routes.get(command)
        if route is None:
            _LOGGER.warning("Received unknown command %r", command)
            raise UnknownCommandError(command)

        domain, operation = route
        _LOGGER.info("Received %s command for %s", operation.value, domain)

        handler: Callable[[str], Awaitable[dict[str, Any]]]
        if domain == TIME_DOMAIN:
            handler = self._read_time
        elif operation is Operation.GET:
            handler = self._store.refresh
        else:
            if self._store.phase(domain) is DomainPhase.DEFAULT:
                _LOGGER.warning(
                    "Writing %s before it was read or merged; seed defaults will "
                    "overwrite the device schedule",
                    domain,
                )
            handler = self._store.flush

        values = await handler(domain)
        return CommandEnvelope(command=command, domain=domain, operation=operation, values=values)

    async def dispatch_message(self, raw: str | bytes) -> CommandEnvelope:
        """Parse a ``{"command": ...}`` message and dispatch it.

        Raises:
            MalformedControlMessageError: If the message cannot be parsed
            UnknownCommandError: If the command is not recognised
        """
        try:
            message = CommandMessage.model_validate_json(raw)
        except ValidationError as err:
            raise MalformedControlMessageError(f"Invalid command message: {err}", raw) from err
        return await self.dispatch(message.command)

    async def read_time(self) -> dict[str, Any]:
        """Read the inverter clock (year, month, day, hour, minute, second)."""
        return await self._read_time(TIME_DOMAIN)

    async def _read_time(self, _domain: str) -> dict[str, Any]:
        clock = self._store.profile.clock
        windows = [
            await self._arbiter.read_window(clock[0].space, start, count)
            for start, count in contiguous_blocks({a for rule in clock for a in rule.addresses})
        ]
        return decode_all(windows, clock)


__all__ = [
    "GET_TIME",
    "TIME_DOMAIN",
    "CommandDispatcher",
    "CommandEnvelope",
    "CommandMessage",
    "Operation",
    "command_name",
]
