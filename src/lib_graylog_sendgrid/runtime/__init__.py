"""Runtime facade exposing module-level ``init``/``send`` over default clients.

Purpose
-------
Give host applications the two-call surface (``init`` once, ``send`` per
event) while the state lives in explicit :class:`GraylogClient` and
:class:`MailClient` objects.

Contents
--------
* ``init`` / ``send`` / ``build_record`` - Graylog default client helpers.
* ``shutdown`` / ``is_initialised`` - teardown and state inspection.
* ``mail`` - the SendGrid facade (``mail.init``, ``mail.send``).

System Role
-----------
Outer shell of the package. A replaced default client is drained and closed
before ``init`` returns, so two configurations never mix.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from lib_graylog_sendgrid.application.use_cases.dispatch import validate_send
from lib_graylog_sendgrid.domain import GelfRecord, Severity

from . import _state, mail
from ._state import GraylogConnection
from .graylog import GraylogClient
from .mail import MailClient


def init(hostname: Any, port: Any, project_name: Any, project_env: Any, **options: Any) -> None:
    """Validate settings and install a new default :class:`GraylogClient`.

    Parameters
    ----------
    hostname, port, project_name, project_env:
        Validated in this order; the first invalid one raises
        :class:`~lib_graylog_sendgrid.domain.errors.ValidationError` and leaves
        any previous configuration untouched.
    **options:
        Forwarded to :class:`GraylogClient` (``connection``, ``use_tls``,
        ``core_distribution``, ``transport_factory`` ...).
    """

    client = GraylogClient(**options)
    client.init(hostname, port, project_name, project_env)
    previous = _state.set_graylog_client(client)
    if previous is not None:
        previous.close()


def send(
    message: str,
    severity: Severity | str = Severity.INFO,
    short_message: str | None = None,
    payload: Mapping[str, Any] | None = None,
) -> None:
    """Send one record through the default client; returns before delivery.

    Arguments are validated before the default client is looked up, so a bad
    call raises :class:`ValidationError` even before ``init``.
    """

    validate_send(message, severity, short_message, payload)
    _state.current_graylog_client().send(message, severity, short_message, payload)


def build_record(
    message: str,
    severity: Severity | str = Severity.INFO,
    short_message: str | None = None,
    payload: Mapping[str, Any] | None = None,
) -> GelfRecord:
    validate_send(message, severity, short_message, payload)
    return _state.current_graylog_client().build_record(message, severity, short_message, payload)


def shutdown() -> None:
    """Drain and close the default Graylog and mail clients."""

    client = _state.take_graylog_client()
    if client is not None:
        client.close()
    mail.shutdown()


def is_initialised() -> bool:
    """Return ``True`` when the default Graylog client is ready for ``send``."""

    return _state.is_initialised()


__all__ = [
    "GraylogClient",
    "GraylogConnection",
    "MailClient",
    "build_record",
    "init",
    "is_initialised",
    "mail",
    "send",
    "shutdown",
]
