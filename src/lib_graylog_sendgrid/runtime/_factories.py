"""Factories that build the concrete collaborators for the runtime clients."""

from __future__ import annotations

import logging
import platform
import socket
from datetime import datetime, timezone
from importlib import metadata

from lib_graylog_sendgrid.adapters import GelfTransport, QueuedGelfTransport, SendGridAdapter
from lib_graylog_sendgrid.adapters.gelf import resolve_protocol
from lib_graylog_sendgrid.application.ports import ClockPort, GelfTransportPort, MailTransportPort

logger = logging.getLogger(__name__)

DEFAULT_CORE_DISTRIBUTION = "lib_graylog_sendgrid"


class SystemClock(ClockPort):
    """Concrete clock returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def resolve_host() -> str:
    """Return the local hostname for the GELF ``host`` field."""

    return socket.gethostname() or "localhost"


def resolve_python_version() -> str:
    return platform.python_version()


def resolve_core_version(distribution: str | None) -> str | None:
    """Read the declared version of ``distribution`` once, or ``None`` when unknown.

    Examples
    --------
    >>> resolve_core_version("definitely-not-installed-distribution") is None
    True
    >>> resolve_core_version(None) is None
    True
    """

    if not distribution:
        return None
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        logger.debug("Distribution %s is not installed; version_core left empty", distribution)
        return None


def create_gelf_transport(
    *,
    host: str,
    port: int,
    connection: str = "wan",
    use_tls: bool = False,
    timeout: float = 1.0,
    queue_size: int = 2048,
) -> GelfTransportPort:
    """Build the queued GELF transport used by :class:`GraylogClient`."""

    inner = GelfTransport(
        host=host,
        port=port,
        protocol=resolve_protocol(connection),
        use_tls=use_tls,
        timeout=timeout,
    )
    return QueuedGelfTransport(inner, maxsize=queue_size)


def create_mail_transport(*, api_key: str, base_url: str | None = None, timeout: float = 10.0) -> MailTransportPort:
    if base_url is None:
        return SendGridAdapter(api_key=api_key, timeout=timeout)
    return SendGridAdapter(api_key=api_key, base_url=base_url, timeout=timeout)


__all__ = [
    "DEFAULT_CORE_DISTRIBUTION",
    "SystemClock",
    "create_gelf_transport",
    "create_mail_transport",
    "resolve_core_version",
    "resolve_host",
    "resolve_python_version",
]
