"""Severity abstraction shared by the Graylog dispatcher and its transport.

Purpose
-------
Offer a domain-specific representation of the five severities accepted by
``send`` and translate them into the numeric syslog levels GELF expects on the
wire.

Contents
--------
* :class:`Severity` enum with conversion helpers.
* ``_SYSLOG_TABLE`` constant mapping severities to syslog priorities.

System Role
-----------
Used by the validator to enforce enum membership and by
:class:`~lib_graylog_sendgrid.domain.record.GelfRecord` when rendering the
GELF ``level`` field.
"""

from __future__ import annotations

from enum import Enum


class Severity(Enum):
    """Ordered log importance levels (``trace`` < ``debug`` < ... < ``error``)."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Return the position of the severity in the ordered set."""

        return _ORDER.index(self)

    @property
    def syslog_level(self) -> int:
        """Return the syslog priority written into the GELF ``level`` field."""

        return _SYSLOG_TABLE[self]

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        normalized = name.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown severity: {name!r}") from exc


_ORDER = (Severity.TRACE, Severity.DEBUG, Severity.INFO, Severity.WARN, Severity.ERROR)

_SYSLOG_TABLE = {
    Severity.TRACE: 7,
    Severity.DEBUG: 7,
    Severity.INFO: 6,
    Severity.WARN: 4,
    Severity.ERROR: 3,
}
# GELF has no dedicated trace priority; it shares syslog "debug".


__all__ = ["Severity"]
