"""Exclusive access gate for the register channel.

Half-duplex serial links corrupt both responses when requests overlap, so
every read and write in the adapter goes through one
:class:`TransportArbiter`.  Waiters are served in submission order
(``asyncio.Lock`` wakes waiters FIFO and does not let new callers barge
ahead of queued ones).

The arbiter never retries and imposes no timeout of its own: the channel
enforces its per-call bound, and a timeout surfaces to the caller as
:class:`~pygrowattspf.transports.exceptions.TransportTimeoutError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from pygrowattspf.registers.fields import RegisterSpace, RegisterWindow

from .exceptions import TransportTimeoutError
from .protocol import RegisterChannel

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class TransportArbiter:
    """Serializes all operations against one :class:`RegisterChannel`.

    Example:
        arbiter = TransportArbiter(channel)
        window = await arbiter.read_holding(1090, 3)
        await arbiter.write_multiple(1090, [100, 100, 0])
    """

    def __init__(self, channel: RegisterChannel) -> None:
        self._channel = channel
        self._lock = asyncio.Lock()

    @property
    def channel(self) -> RegisterChannel:
        """Get the underlying register channel."""
        return self._channel

    @property
    def busy(self) -> bool:
        """True while an operation holds the channel."""
        return self._lock.locked()

    async def with_exclusive_access(
        self,
        operation: Callable[[RegisterChannel], Awaitable[T]],
    ) -> T:
        """Run one channel operation while holding the gate.

        The gate is released on every exit path, including exceptions.

        Args:
            operation: Callable receiving the channel and performing exactly
                one read or write on it

        Returns:
            Whatever ``operation`` returns

        Raises:
            TransportTimeoutError: If the channel timed out
        """
        async with self._lock:
            try:
                return await operation(self._channel)
            except TransportTimeoutError:
                raise
            except TimeoutError as err:
                raise TransportTimeoutError("Register channel timed out") from err

    async def read_holding(self, address: int, count: int) -> RegisterWindow:
        """Read a holding register window."""
        _LOGGER.debug("Reading holding registers %d+%d", address, count)
        words = await self.with_exclusive_access(lambda ch: ch.read_holding(address, count))
        return RegisterWindow(RegisterSpace.HOLDING, address, tuple(words))

    async def read_input(self, address: int, count: int) -> RegisterWindow:
        """Read an input register window."""
        _LOGGER.debug("Reading input registers %d+%d", address, count)
        words = await self.with_exclusive_access(lambda ch: ch.read_input(address, count))
        return RegisterWindow(RegisterSpace.INPUT, address, tuple(words))

    async def read_window(self, space: RegisterSpace, address: int, count: int) -> RegisterWindow:
        """Read a window from either register space."""
        if space is RegisterSpace.INPUT:
            return await self.read_input(address, count)
        return await self.read_holding(address, count)

    async def write_multiple(self, address: int, words: Sequence[int]) -> None:
        """Write consecutive holding registers."""
        values = list(words)
        _LOGGER.debug("Writing holding registers %d: %s", address, values)
        await self.with_exclusive_access(lambda ch: ch.write_multiple(address, values))


__all__ = ["TransportArbiter"]
