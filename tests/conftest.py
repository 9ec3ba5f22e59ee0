"""Shared test fixtures for pygrowattspf."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from pygrowattspf.registers.profiles import (
    EXTENDED_PROFILE,
    PACKED_PROFILE,
    SCALED_PROFILE,
    DeviceProfile,
)
from pygrowattspf.transports.arbiter import TransportArbiter
from pygrowattspf.transports.exceptions import TransportWriteError


class FakeRegisterChannel:
    """In-memory register channel.

    Unwritten registers read as 0.  Every call is recorded in ``calls`` as
    ``(op, address, count_or_words)``.  ``fail_writes_at`` lists start
    addresses whose writes raise; ``delay`` makes every call yield to the
    event loop for that many seconds, and ``active`` tracks overlap.
    """

    def __init__(
        self,
        holding: dict[int, int] | None = None,
        input_registers: dict[int, int] | None = None,
    ) -> None:
        self.holding: dict[int, int] = dict(holding or {})
        self.input: dict[int, int] = dict(input_registers or {})
        self.calls: list[tuple[str, int, object]] = []
        self.fail_writes_at: set[int] = set()
        self.read_error: Exception | None = None
        self.delay = 0.0
        self.active = 0
        self.max_active = 0
        self.connected = False

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def _enter(self) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1

    async def read_holding(self, address: int, count: int) -> list[int]:
        self.calls.append(("read_holding", address, count))
        await self._enter()
        if self.read_error is not None:
            raise self.read_error
        return [self.holding.get(a, 0) for a in range(address, address + count)]

    async def read_input(self, address: int, count: int) -> list[int]:
        self.calls.append(("read_input", address, count))
        await self._enter()
        if self.read_error is not None:
            raise self.read_error
        return [self.input.get(a, 0) for a in range(address, address + count)]

    async def write_multiple(self, address: int, words: Sequence[int]) -> None:
        self.calls.append(("write_multiple", address, list(words)))
        await self._enter()
        if address in self.fail_writes_at:
            raise TransportWriteError(f"Injected write failure at {address}")
        for offset, word in enumerate(words):
            self.holding[address + offset] = word

    @property
    def writes(self) -> list[tuple[int, list[int]]]:
        return [(address, words) for op, address, words in self.calls if op == "write_multiple"]  # type: ignore[misc]


@pytest.fixture
def channel() -> FakeRegisterChannel:
    """Empty fake register channel."""
    return FakeRegisterChannel()


@pytest.fixture
def arbiter(channel: FakeRegisterChannel) -> TransportArbiter:
    """Arbiter over the fake channel."""
    return TransportArbiter(channel)


@pytest.fixture
def packed_profile() -> DeviceProfile:
    return PACKED_PROFILE


@pytest.fixture
def scaled_profile() -> DeviceProfile:
    return SCALED_PROFILE


@pytest.fixture
def extended_profile() -> DeviceProfile:
    return EXTENDED_PROFILE
