"""Adapter configuration.

This module provides the AdapterConfig dataclass describing the serial link
and the register layout, with serialization to/from dictionaries and
loading from the add-on ``options.json`` file.

Example:
    config = AdapterConfig(port="/dev/ttyUSB0", profile=ProfileName.EXTENDED)
    config.validate()

    # Serialize to dict for storage
    data = config.to_dict()

    # Restore from dict
    restored = AdapterConfig.from_dict(data)

    # Load the add-on options file
    config = AdapterConfig.from_options_file("options.json")
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pygrowattspf.registers.profiles import ProfileName

# Link timeouts outside this range are not useful on a 9600 baud RS485 link.
MIN_TIMEOUT = 0.1
MAX_TIMEOUT = 5.0

VALID_PARITIES = frozenset({"N", "E", "O"})


@dataclass
class AdapterConfig:
    """Configuration for one inverter on one serial port.

    Attributes:
        port: Serial device path (e.g. /dev/ttyUSB0)
        profile: Register layout of the inverter firmware
        baudrate: Serial baud rate (default 9600)
        bytesize: Data bits per byte (default 8)
        parity: 'N', 'E' or 'O' (default 'N')
        stopbits: Stop bits (default 1)
        unit_id: Modbus unit/slave ID (default 1)
        timeout: Per-call link timeout in seconds (default 1.0)
        retries: Link-level retries handed to pymodbus (default 0, so a
            write is never repeated blindly)
    """

    port: str
    profile: ProfileName = ProfileName.EXTENDED
    baudrate: int = 9600
    bytesize: int = 8
    parity: str = "N"
    stopbits: int = 1
    unit_id: int = 1
    timeout: float = 1.0
    retries: int = 0

    def validate(self) -> None:
        """Validate configuration completeness.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.port:
            raise ValueError("port is required")
        if self.parity not in VALID_PARITIES:
            raise ValueError(f"parity must be one of {sorted(VALID_PARITIES)}")
        if not 1 <= self.unit_id <= 247:
            raise ValueError("unit_id must be between 1 and 247")
        if not MIN_TIMEOUT <= self.timeout <= MAX_TIMEOUT:
            raise ValueError(f"timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds")
        if self.retries < 0:
            raise ValueError("retries must not be negative")

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "port": self.port,
            "profile": self.profile.value,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "unit_id": self.unit_id,
            "timeout": self.timeout,
            "retries": self.retries,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdapterConfig:
        """Create configuration from a flat dictionary (from :meth:`to_dict`).

        Raises:
            ValueError: If the profile name is unknown
        """
        return cls(
            port=data.get("port", ""),
            profile=ProfileName(data.get("profile", ProfileName.EXTENDED.value)),
            baudrate=data.get("baudrate", 9600),
            bytesize=data.get("bytesize", 8),
            parity=data.get("parity", "N"),
            stopbits=data.get("stopbits", 1),
            unit_id=data.get("unit_id", 1),
            timeout=data.get("timeout", 1.0),
            retries=data.get("retries", 0),
        )

    @classmethod
    def from_options_file(cls, path: str | Path) -> AdapterConfig:
        """Load configuration from an add-on ``options.json`` file.

        Accepts either a flat dictionary or the add-on shape
        ``{"inverter": {"usbDevice": "/dev/ttyUSB0", "model": "extended"}}``.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not valid JSON or names an unknown profile
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object")

        inverter = data.get("inverter")
        if isinstance(inverter, dict):
            flat = dict(inverter)
            flat["port"] = inverter.get("usbDevice", inverter.get("port", ""))
            if "model" in inverter:
                flat["profile"] = inverter["model"]
            return cls.from_dict(flat)
        return cls.from_dict(data)


__all__ = [
    "AdapterConfig",
]
