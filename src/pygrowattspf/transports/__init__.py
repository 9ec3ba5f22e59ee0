"""Transport layer for pygrowattspf.

The adapter consumes an abstract :class:`RegisterChannel`; every call to
it is serialized by a :class:`TransportArbiter`.

Usage:
    from pygrowattspf.transports import ModbusSerialChannel, TransportArbiter

    channel = ModbusSerialChannel(port="/dev/ttyUSB0")
    await channel.connect()
    arbiter = TransportArbiter(channel)
    window = await arbiter.read_input(0, 90)
"""

from __future__ import annotations

from .arbiter import TransportArbiter
from .config import AdapterConfig
from .exceptions import (
    TransportConnectionError,
    TransportError,
    TransportReadError,
    TransportTimeoutError,
    TransportWriteError,
)
from .modbus_serial import ModbusSerialChannel
from .protocol import RegisterChannel

__all__ = [
    # Protocol
    "RegisterChannel",
    # Implementations
    "ModbusSerialChannel",
    "TransportArbiter",
    # Configuration
    "AdapterConfig",
    # Exceptions
    "TransportError",
    "TransportConnectionError",
    "TransportTimeoutError",
    "TransportReadError",
    "TransportWriteError",
]
