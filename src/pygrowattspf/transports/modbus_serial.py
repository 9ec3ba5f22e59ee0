"""Modbus RTU serial channel implementation.

This module provides the ModbusSerialChannel class for direct local
communication with Growatt SPF inverters via Modbus RTU over a
USB-to-RS485 serial adapter.

IMPORTANT: Single-Client Limitation
------------------------------------
Serial ports support only ONE concurrent connection.
Running multiple clients causes communication errors and data corruption.

Ensure only ONE process connects to each serial port at a time, and route
every call through a :class:`~pygrowattspf.transports.arbiter.TransportArbiter`.

Example:
    channel = ModbusSerialChannel(port="/dev/ttyUSB0")
    await channel.connect()

    words = await channel.read_input(0, 90)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pymodbus.exceptions import ModbusIOException

from .exceptions import (
    TransportConnectionError,
    TransportReadError,
    TransportTimeoutError,
    TransportWriteError,
)

if TYPE_CHECKING:
    from pymodbus.client import AsyncModbusSerialClient

    from .config import AdapterConfig

_LOGGER = logging.getLogger(__name__)


class ModbusSerialChannel:
    """Modbus RTU register channel backed by pymodbus.

    Framing, CRC and inter-frame timing are handled by pymodbus.  This class
    maps pymodbus results and failures onto the transport exception types
    and performs no application-level retries.

    Note:
        Requires the `pymodbus` and `pyserial` packages to be installed.
    """

    transport_type: str = "modbus_serial"

    def __init__(
        self,
        port: str,
        baudrate: int = 9600,
        bytesize: int = 8,
        parity: str = "N",
        stopbits: int = 1,
        unit_id: int = 1,
        timeout: float = 1.0,
        retries: int = 0,
    ) -> None:
        """Initialize Modbus serial channel.

        Args:
            port: Serial port path (e.g., /dev/ttyUSB0, COM3)
            baudrate: Serial baud rate (default 9600 for SPF inverters)
            bytesize: Data bits per byte (default 8)
            parity: Parity setting - 'N' (none), 'E' (even), 'O' (odd)
            stopbits: Number of stop bits (default 1)
            unit_id: Modbus unit/slave ID (default 1)
            timeout: Per-call timeout in seconds, enforced by pymodbus
            retries: Link-level retries passed to pymodbus (default 0)
        """
        self._port = port
        self._baudrate = baudrate
        self._bytesize = bytesize
        self._parity = parity
        self._stopbits = stopbits
        self._unit_id = unit_id
        self._timeout = timeout
        self._retries = retries
        self._client: AsyncModbusSerialClient | None = None
        self._connected = False

    @classmethod
    def from_config(cls, config: AdapterConfig) -> ModbusSerialChannel:
        """Create a channel from an :class:`AdapterConfig`."""
        config.validate()
        return cls(
            port=config.port,
            baudrate=config.baudrate,
            bytesize=config.bytesize,
            parity=config.parity,
            stopbits=config.stopbits,
            unit_id=config.unit_id,
            timeout=config.timeout,
            retries=config.retries,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def port(self) -> str:
        """Get the serial port path."""
        return self._port

    @property
    def baudrate(self) -> int:
        """Get the serial baud rate."""
        return self._baudrate

    @property
    def unit_id(self) -> int:
        """Get the Modbus unit/slave ID."""
        return self._unit_id

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Establish Modbus RTU serial connection.

        Raises:
            TransportConnectionError: If connection fails
        """
        try:
            from pymodbus.client import AsyncModbusSerialClient

            self._client = AsyncModbusSerialClient(
                port=self._port,
                baudrate=self._baudrate,
                bytesize=self._bytesize,
                parity=self._parity,
                stopbits=self._stopbits,
                timeout=self._timeout,
                retries=self._retries,
            )

            connected = await self._client.connect()
            if not connected:
                raise TransportConnectionError(f"Failed to connect to serial port {self._port}")

            self._connected = True
            _LOGGER.info(
                "Modbus serial channel connected to %s @ %d baud (unit %s)",
                self._port,
                self._baudrate,
                self._unit_id,
            )

            # Brief delay to allow serial port to stabilize
            await asyncio.sleep(0.2)

        except PermissionError as err:
            _LOGGER.error("Permission denied opening serial port %s: %s", self._port, err)
            raise TransportConnectionError(
                f"Permission denied for {self._port}. "
                "On Linux, add user to 'dialout' group: "
                "sudo usermod -a -G dialout $USER"
            ) from err
        except (TimeoutError, OSError) as err:
            _LOGGER.error("Failed to connect to serial port %s: %s", self._port, err)
            raise TransportConnectionError(f"Failed to connect to {self._port}: {err}") from err

    async def disconnect(self) -> None:
        """Close Modbus serial connection."""
        if self._client:
            self._client.close()
            self._client = None

        self._connected = False
        _LOGGER.debug("Modbus serial channel disconnected from %s", self._port)

    def _require_client(self) -> AsyncModbusSerialClient:
        if not self._connected or self._client is None:
            raise TransportConnectionError(f"Serial channel {self._port} is not connected")
        return self._client

    # ------------------------------------------------------------------
    # Register Read/Write
    # ------------------------------------------------------------------

    async def _read(self, address: int, count: int, *, input_registers: bool) -> list[int]:
        """Read registers with a single request.

        Raises:
            TransportReadError: If the device answered with an error
            TransportTimeoutError: If the device did not answer in time
        """
        client = self._require_client()
        reg_type = "input" if input_registers else "holding"
        read_fn = client.read_input_registers if input_registers else client.read_holding_registers

        try:
            result = await read_fn(address=address, count=count, device_id=self._unit_id)
        except ModbusIOException as err:
            if "timeout" in str(err).lower():
                raise TransportTimeoutError(
                    f"Timeout reading {reg_type} registers at {address}"
                ) from err
            raise TransportReadError(
                f"Failed to read {reg_type} registers at {address}: {err}"
            ) from err
        except TimeoutError as err:
            raise TransportTimeoutError(
                f"Timeout reading {reg_type} registers at {address}"
            ) from err
        except OSError as err:
            raise TransportReadError(
                f"Failed to read {reg_type} registers at {address}: {err}"
            ) from err

        if result.isError():
            raise TransportReadError(f"Modbus read error at address {address}: {result}")

        registers = getattr(result, "registers", None)
        if registers is None or len(registers) != count:
            raise TransportReadError(
                f"Invalid Modbus response at address {address}: expected {count} registers"
            )
        return list(registers)

    async def read_holding(self, address: int, count: int) -> list[int]:
        """Read holding registers (configuration parameters)."""
        return await self._read(address, count, input_registers=False)

    async def read_input(self, address: int, count: int) -> list[int]:
        """Read input registers (read-only runtime data)."""
        return await self._read(address, count, input_registers=True)

    async def write_multiple(self, address: int, words: Sequence[int]) -> None:
        """Write holding registers with function code 16.

        Raises:
            TransportWriteError: If write fails
            TransportTimeoutError: If operation times out
        """
        client = self._require_client()

        try:
            result = await client.write_registers(
                address=address,
                values=list(words),
                device_id=self._unit_id,
            )
        except ModbusIOException as err:
            if "timeout" in str(err).lower():
                _LOGGER.error("Timeout writing registers at %d", address)
                raise TransportTimeoutError(f"Timeout writing registers at {address}") from err
            _LOGGER.error("Failed to write registers at %d: %s", address, err)
            raise TransportWriteError(f"Failed to write registers at {address}: {err}") from err
        except TimeoutError as err:
            _LOGGER.error("Timeout writing registers at %d", address)
            raise TransportTimeoutError(f"Timeout writing registers at {address}") from err
        except OSError as err:
            _LOGGER.error("Failed to write registers at %d: %s", address, err)
            raise TransportWriteError(f"Failed to write registers at {address}: {err}") from err

        if result.isError():
            _LOGGER.error("Modbus error writing registers at %d: %s", address, result)
            raise TransportWriteError(f"Modbus write error at address {address}: {result}")


__all__ = ["ModbusSerialChannel"]
