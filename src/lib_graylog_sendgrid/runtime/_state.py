"""Connection state container and module-level default client helpers."""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import TYPE_CHECKING

from lib_graylog_sendgrid.application.ports import GelfTransportPort
from lib_graylog_sendgrid.domain import NotInitializedError

if TYPE_CHECKING:
    from .graylog import GraylogClient
    from .mail import MailClient


@dataclass(frozen=True, slots=True)
class GraylogConnection:
    """Snapshot captured by ``init`` and read whole by every ``send``."""

    hostname: str
    port: int
    project_name: str
    project_env: str
    version_core: str | None
    transport: GelfTransportPort


_GRAYLOG: GraylogClient | None = None
_MAIL: MailClient | None = None
_STATE_LOCK = RLock()


def set_graylog_client(client: GraylogClient) -> GraylogClient | None:
    """Install ``client`` as the module default and return the one it replaced."""

    global _GRAYLOG
    with _STATE_LOCK:
        previous, _GRAYLOG = _GRAYLOG, client
        return previous


def take_graylog_client() -> GraylogClient | None:
    """Remove and return the module default client."""

    global _GRAYLOG
    with _STATE_LOCK:
        client, _GRAYLOG = _GRAYLOG, None
        return client


def current_graylog_client() -> GraylogClient:
    """Return the module default client or raise when uninitialised."""

    with _STATE_LOCK:
        if _GRAYLOG is None:
            raise NotInitializedError("lib_graylog_sendgrid.init() must be called before send()")
        return _GRAYLOG


def is_initialised() -> bool:
    with _STATE_LOCK:
        return _GRAYLOG is not None and _GRAYLOG.is_initialised()


def set_mail_client(client: MailClient) -> MailClient | None:
    global _MAIL
    with _STATE_LOCK:
        previous, _MAIL = _MAIL, client
        return previous


def take_mail_client() -> MailClient | None:
    global _MAIL
    with _STATE_LOCK:
        client, _MAIL = _MAIL, None
        return client


def current_mail_client() -> MailClient:
    with _STATE_LOCK:
        if _MAIL is None:
            raise NotInitializedError("lib_graylog_sendgrid.mail.init() must be called before mail.send()")
        return _MAIL


__all__ = [
    "GraylogConnection",
    "current_graylog_client",
    "current_mail_client",
    "is_initialised",
    "set_graylog_client",
    "set_mail_client",
    "take_graylog_client",
    "take_mail_client",
]
