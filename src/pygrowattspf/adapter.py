"""Protocol adapter for one Growatt SPF inverter.

:class:`InverterAdapter` is the surface the surrounding application (an
MQTT bridge, a CLI) talks to.  It is constructed with a register channel and
a :class:`~pygrowattspf.registers.profiles.DeviceProfile`, and owns the
arbiter, the control store and the dispatcher built on them.

Example:
    config = AdapterConfig.from_options_file("options.json")
    async with InverterAdapter.from_config(config) as adapter:
        sensors = await adapter.read_sensors()
        adapter.merge_control("touCharging", '{"stopSOC": 80}')
        await adapter.dispatch("setTouCharging")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from pygrowattspf.control import ControlStateStore, DomainPhase
from pygrowattspf.dispatcher import CommandDispatcher, CommandEnvelope
from pygrowattspf.registers.codec import decode_all
from pygrowattspf.registers.fields import FieldKind, FieldRule, RegisterSpace
from pygrowattspf.registers.profiles import DeviceProfile, get_profile
from pygrowattspf.transports.arbiter import TransportArbiter
from pygrowattspf.transports.config import AdapterConfig
from pygrowattspf.transports.modbus_serial import ModbusSerialChannel
from pygrowattspf.transports.protocol import RegisterChannel

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSchema:
    """Type and bounds of one control field, for building UIs."""

    name: str
    type: str  # "number" or "enum"
    minimum: float | None = None
    maximum: float | None = None
    step: float | None = None
    choices: tuple[str, ...] = ()
    unit: str = ""

    @classmethod
    def from_rule(cls, rule: FieldRule) -> FieldSchema:
        if rule.kind is FieldKind.ENUM:
            return cls(name=rule.name, type="enum", choices=rule.choices, unit=rule.unit)
        return cls(
            name=rule.name,
            type="number",
            minimum=rule.minimum,
            maximum=rule.maximum,
            step=1 / rule.scale.value,
            unit=rule.unit,
        )


@dataclass(frozen=True)
class DomainSchema:
    """Field schemas of one control domain."""

    name: str
    fields: tuple[FieldSchema, ...]


class InverterAdapter:
    """Typed access to one inverter's registers.

    All register traffic goes through a single :class:`TransportArbiter`,
    so sensor polling, domain refreshes and flushes may be awaited from
    concurrent tasks.
    """

    def __init__(self, channel: RegisterChannel, profile: DeviceProfile) -> None:
        """Initialize the adapter.

        Args:
            channel: Register channel (connected or not; see :meth:`connect`)
            profile: Register layout of the inverter firmware
        """
        self._channel = channel
        self._profile = profile
        self._arbiter = TransportArbiter(channel)
        self._store = ControlStateStore(profile, self._arbiter)
        self._dispatcher = CommandDispatcher(self._store, self._arbiter)

    @classmethod
    def from_config(cls, config: AdapterConfig) -> InverterAdapter:
        """Create an adapter with a Modbus RTU serial channel.

        Raises:
            ValueError: If the configuration is invalid
        """
        return cls(ModbusSerialChannel.from_config(config), get_profile(config.profile))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def profile(self) -> DeviceProfile:
        return self._profile

    @property
    def arbiter(self) -> TransportArbiter:
        return self._arbiter

    @property
    def store(self) -> ControlStateStore:
        return self._store

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if not self._channel.is_connected:
            await self._channel.connect()

    async def disconnect(self) -> None:
        await self._channel.disconnect()

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    # ------------------------------------------------------------------
    # Sensors
    # ------------------------------------------------------------------

    async def read_sensors(self) -> dict[str, Any]:
        """Read and decode every sensor field of the profile.

        Status and error codes decode to their description, or to the raw
        code when the table does not know it.  Derived totals are added
        after decoding.

        Raises:
            TransportError: If a read fails
        """
        windows = [
            await self._arbiter.read_window(RegisterSpace.INPUT, start, count)
            for start, count in self._profile.sensor_groups
        ]
        values: dict[str, Any] = decode_all(windows, self._profile.sensors)
        for name, sources in self._profile.derived_sensors.items():
            values[name] = round(sum(values[source] for source in sources), 1)
        return values

    async def read_time(self) -> dict[str, Any]:
        """Read the inverter clock."""
        return await self._dispatcher.read_time()

    # ------------------------------------------------------------------
    # Commands and control
    # ------------------------------------------------------------------

    async def dispatch(self, command: str) -> CommandEnvelope:
        """Run a named command (``getTouCharging``, ``setTouDischarging``, ``getTime``...)."""
        return await self._dispatcher.dispatch(command)

    async def dispatch_message(self, raw: str | bytes) -> CommandEnvelope:
        """Run a command given as ``{"command": "<name>"}``."""
        return await self._dispatcher.dispatch_message(raw)

    def merge_control(
        self,
        domain: str,
        raw: str | bytes | Mapping[str, Any],
    ) -> dict[str, Any]:
        """Apply an inbound partial update to a domain's cache.

        Returns:
            The domain's full state after the merge

        Raises:
            UnknownDomainError: If the domain is not in the profile
            MalformedControlMessageError: If ``raw`` is not a mapping
        """
        return self._store.merge(domain, raw)

    def control_values(self) -> dict[str, dict[str, Any]]:
        """Current cached values of every domain."""
        return self._store.snapshot_all()

    def control_phase(self, domain: str) -> DomainPhase:
        return self._store.phase(domain)

    async def read_control_values(self) -> dict[str, dict[str, Any]]:
        """Refresh every domain from the device."""
        return {name: await self._store.refresh(name) for name in self._profile.domain_names}

    def domain_schemas(self) -> list[DomainSchema]:
        """Field schemas of every control domain, in profile order."""
        return [
            DomainSchema(
                name=domain.name,
                fields=tuple(FieldSchema.from_rule(rule) for rule in domain.fields),
            )
            for domain in self._profile.domains
        ]


__all__ = ["DomainSchema", "FieldSchema", "InverterAdapter"]
