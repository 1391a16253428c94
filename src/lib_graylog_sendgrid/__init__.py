"""Graylog GELF and SendGrid mail clients for service runtimes.

Typical use::

    import lib_graylog_sendgrid as relay

    relay.init("graylog.internal", 12201, "checkout", "production")
    relay.send("payment captured", "info", payload={"order": 1234})

    relay.mail.init(api_key, default_sender="noreply@example.com")
    relay.mail.send("ops@example.com", "Nightly report", text="all green")
"""

from __future__ import annotations

from .domain import (
    GelfRecord,
    MailDeliveryError,
    NotInitializedError,
    RelayError,
    Severity,
    TransportError,
    ValidationError,
    truncate,
)
from .runtime import (
    GraylogClient,
    MailClient,
    build_record,
    init,
    is_initialised,
    mail,
    send,
    shutdown,
)

__all__ = [
    "GelfRecord",
    "GraylogClient",
    "MailClient",
    "MailDeliveryError",
    "NotInitializedError",
    "RelayError",
    "Severity",
    "TransportError",
    "ValidationError",
    "build_record",
    "init",
    "is_initialised",
    "mail",
    "send",
    "shutdown",
    "truncate",
]
