"""Register-access channel protocol.

The adapter talks to the device only through this interface.  Link
framing, CRC and baud timing belong to the implementation (pymodbus for
:class:`~pygrowattspf.transports.modbus_serial.ModbusSerialChannel`).

Implementations are not required to be safe for overlapping calls; the
:class:`~pygrowattspf.transports.arbiter.TransportArbiter` guarantees only
one call is in flight at a time.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class RegisterChannel(Protocol):
    """Raw register reads and writes against one device.

    Each call may raise
    :class:`~pygrowattspf.transports.exceptions.TransportTimeoutError` when
    the link does not answer within its configured bound.
    """

    @property
    def is_connected(self) -> bool:
        """True once :meth:`connect` has succeeded."""
        ...

    async def connect(self) -> None:
        """Open the link."""
        ...

    async def disconnect(self) -> None:
        """Close the link."""
        ...

    async def read_holding(self, address: int, count: int) -> list[int]:
        """Read ``count`` holding registers starting at ``address`` (FC03)."""
        ...

    async def read_input(self, address: int, count: int) -> list[int]:
        """Read ``count`` input registers starting at ``address`` (FC04)."""
        ...

    async def write_multiple(self, address: int, words: Sequence[int]) -> None:
        """Write consecutive holding registers starting at ``address`` (FC16)."""
        ...


__all__ = ["RegisterChannel"]
