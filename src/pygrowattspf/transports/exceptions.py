"""Transport-specific exceptions.

All transport exceptions inherit from :class:`~pygrowattspf.exceptions.GrowattError`
so callers can use a single ``except GrowattError`` to catch both control
validation and serial link failures.
"""

from __future__ import annotations

from pygrowattspf.exceptions import GrowattError


class TransportError(GrowattError):
    """Base exception for failures on the RS485 register link."""

    pass


class TransportConnectionError(TransportError):
    """Serial port could not be opened, or was used before connect."""

    pass


class TransportTimeoutError(TransportError):
    """The link did not answer within its per-call bound.

    Never retried by the library; a blind retry of a write against a
    stateful device is not always safe.
    """

    pass


class TransportReadError(TransportError):
    """Inverter answered a holding or input read with an exception response
    or the wrong number of registers."""

    pass


class TransportWriteError(TransportError):
    """Inverter rejected a write-multiple (FC16) request.

    Earlier blocks of the same flush may already be written.
    """

    pass


__all__ = [
    "TransportConnectionError",
    "TransportError",
    "TransportReadError",
    "TransportTimeoutError",
    "TransportWriteError",
]
