"""Port describing the GELF transport handle owned by a connection."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from lib_graylog_sendgrid.domain.errors import TransportError
from lib_graylog_sendgrid.domain.record import GelfRecord

ErrorObserver = Callable[[TransportError], None]


@runtime_checkable
class GelfTransportPort(Protocol):
    """Emit GELF records to a Graylog collector.

    ``emit`` is best-effort and at-most-once: it never raises on delivery
    failure and never reports acknowledgement. Failures are delivered to the
    observers registered through ``on_error``.
    """

    def emit(self, record: GelfRecord) -> None:
        """Hand ``record`` to the collector."""

    def on_error(self, observer: ErrorObserver) -> None:
        """Register ``observer`` for transport-level delivery errors."""

    def close(self) -> None:
        """Release sockets and background resources."""


__all__ = ["ErrorObserver", "GelfTransportPort"]
