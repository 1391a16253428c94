"""Argument validation for the public ``init``/``send`` entry points.

Every check runs in a fixed order and raises :class:`ValidationError` for the
first violation, so a given combination of bad arguments always reports the
same field.

Check order
-----------
* Graylog ``init``: hostname, port, project_name, project_env.
* Graylog ``send``: message, severity, short_message, payload.
* Mail ``init``: api_key, default_sender.
* Mail ``send``: to, subject, body (text/html), sender, categories,
  custom_args.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from .errors import ValidationError
from .levels import Severity

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_string(field: str, value: Any) -> str:
    """Return ``value`` when it is a non-empty string.

    Examples
    --------
    >>> require_string("message", "hi")
    'hi'
    >>> require_string("message", "")
    Traceback (most recent call last):
    ...
    lib_graylog_sendgrid.domain.errors.ValidationError: message must not be empty
    """

    if value is None:
        raise ValidationError(field, "is required")
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    if value == "":
        raise ValidationError(field, "must not be empty")
    return value


def require_port(field: str, value: Any) -> int:
    if value is None:
        raise ValidationError(field, "is required")
    # bool is an int subclass but never a meaningful port
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "must be an integer")
    if not 0 < value < 65536:
        raise ValidationError(field, "must be between 1 and 65535")
    return value


def require_severity(value: Any) -> Severity:
    """Coerce ``value`` into :class:`Severity` or raise :class:`ValidationError`."""

    if isinstance(value, Severity):
        return value
    if value is None:
        raise ValidationError("severity", "is required")
    if not isinstance(value, str):
        raise ValidationError("severity", "must be a string")
    try:
        return Severity(value)
    except ValueError:
        allowed = ", ".join(Severity.names())
        raise ValidationError("severity", f"must be one of: {allowed}") from None


def require_payload(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("payload", "must be a mapping")
    for key in value:
        if not isinstance(key, str):
            raise ValidationError("payload", "keys must be strings")
    return dict(value)


def require_email(field: str, value: Any) -> str:
    address = require_string(field, value)
    if not _EMAIL_RE.match(address):
        raise ValidationError(field, "must be an email address")
    return address


def require_recipients(field: str, value: Any) -> list[str]:
    """Accept a single address or a non-empty sequence of addresses."""

    if isinstance(value, str) or value is None:
        return [require_email(field, value)]
    if not isinstance(value, Sequence) or not value:
        raise ValidationError(field, "must be an address or a non-empty list of addresses")
    return [require_email(field, item) for item in value]


def require_categories(value: Any) -> tuple[str, ...]:
    """Accept ``None`` or a sequence of non-empty strings; a bare string is rejected."""

    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValidationError("categories", "must be a list of strings")
    return tuple(require_string("categories", item) for item in value)


def require_custom_args(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("custom_args", "must be a mapping")
    for key in value:
        if not isinstance(key, str):
            raise ValidationError("custom_args", "keys must be strings")
    return {key: str(item) for key, item in value.items()}


def validate_graylog_init(hostname: Any, port: Any, project_name: Any, project_env: Any) -> tuple[str, int, str, str]:
    """Validate ``init`` arguments in documented order."""

    return (
        require_string("hostname", hostname),
        require_port("port", port),
        require_string("project_name", project_name),
        require_string("project_env", project_env),
    )


def validate_graylog_send(
    message: Any,
    severity: Any,
    short_message: Any,
    payload: Any,
) -> tuple[str, Severity, str, dict[str, Any]]:
    """Validate ``send`` arguments; ``short_message`` defaults to ``message``."""

    checked_message = require_string("message", message)
    checked_severity = require_severity(severity)
    checked_short = checked_message if short_message is None else require_string("short_message", short_message)
    return checked_message, checked_severity, checked_short, require_payload(payload)


__all__ = [
    "require_categories",
    "require_custom_args",
    "require_email",
    "require_payload",
    "require_port",
    "require_recipients",
    "require_severity",
    "require_string",
    "validate_graylog_init",
    "validate_graylog_send",
]
