"""Async Modbus register adapter for Growatt SPF off-grid inverters.

Usage:
    from pygrowattspf import AdapterConfig, InverterAdapter

    config = AdapterConfig(port="/dev/ttyUSB0", profile="extended")
    async with InverterAdapter.from_config(config) as adapter:
        sensors = await adapter.read_sensors()
        print(sensors["inverterStatus"], sensors["soc"])

        adapter.merge_control("touDischarging", {"dischargeStopSOC": 20})
        await adapter.dispatch("setTouDischarging")
"""

from __future__ import annotations

from .adapter import DomainSchema, FieldSchema, InverterAdapter
from .control import ControlStateStore, DomainPhase
from .dispatcher import CommandDispatcher, CommandEnvelope, Operation
from .exceptions import (
    FieldViolation,
    GrowattError,
    InvalidFieldValueError,
    MalformedControlMessageError,
    PartialFlushError,
    UnknownCommandError,
    UnknownDomainError,
    ValidationFailedError,
)
from .registers import DeviceProfile, ProfileName, get_profile
from .transports import (
    AdapterConfig,
    ModbusSerialChannel,
    RegisterChannel,
    TransportArbiter,
    TransportError,
    TransportTimeoutError,
)

__version__ = "0.1.0"
__all__ = [
    "InverterAdapter",
    "AdapterConfig",
    # Components
    "CommandDispatcher",
    "CommandEnvelope",
    "ControlStateStore",
    "DomainPhase",
    "DomainSchema",
    "FieldSchema",
    "Operation",
    "TransportArbiter",
    # Profiles
    "DeviceProfile",
    "ProfileName",
    "get_profile",
    # Channels
    "ModbusSerialChannel",
    "RegisterChannel",
    # Exceptions
    "FieldViolation",
    "GrowattError",
    "InvalidFieldValueError",
    "MalformedControlMessageError",
    "PartialFlushError",
    "TransportError",
    "TransportTimeoutError",
    "UnknownCommandError",
    "UnknownDomainError",
    "ValidationFailedError",
]
