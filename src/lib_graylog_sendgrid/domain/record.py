"""GELF log record built fresh for every ``send`` call.

Purpose
-------
Provide an immutable representation of one structured log event together with
its GELF 1.1 wire rendering.

Contents
--------
* :class:`GelfRecord` dataclass with :meth:`GelfRecord.to_gelf`.
* ``RESERVED_FIELDS`` naming the additional fields owned by the record itself.

System Role
-----------
Domain value object; the dispatcher constructs it, transports serialise it via
:meth:`GelfRecord.to_gelf`. Nothing is persisted.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from .levels import Severity

GELF_VERSION = "1.1"

RESERVED_FIELDS = frozenset(
    {
        "severity",
        "project_name",
        "project_env",
        "stack_trace",
        "file",
        "version_python",
        "version_core",
    }
)
# GELF forbids "_id"; payload keys may not shadow the record's own fields either.
_FORBIDDEN_PAYLOAD_KEYS = RESERVED_FIELDS | {"id"}
# Graylog drops additional fields whose names fall outside ^[\w.\-]*$ (ASCII)
_ILLEGAL_FIELD_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


@dataclass(slots=True, frozen=True)
class GelfRecord:
    """Structured log record handed to the GELF transport.

    Attributes
    ----------
    short_message:
        Truncated headline (at most 50 characters plus ``"..."``).
    full_message:
        Original, untruncated message.
    level:
        :class:`Severity` supplied by the caller.
    project_name / project_env:
        Copied from the connection state at send time.
    stack_trace / file:
        Caller context recovered from the stack; ``file`` may be ``None``.
    version_python / version_core:
        Runtime and core library versions.
    host:
        Origin host reported in the GELF ``host`` field.
    timestamp:
        Seconds since the epoch.
    payload:
        Free-form caller data, flattened into additional fields on the wire.
    """

    short_message: str
    full_message: str
    level: Severity
    project_name: str
    project_env: str
    stack_trace: str
    file: str | None
    version_python: str
    version_core: str | None
    host: str
    timestamp: float
    payload: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", dict(self.payload))

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a plain dictionary keyed by attribute name."""

        return {
            "short_message": self.short_message,
            "full_message": self.full_message,
            "level": self.level.value,
            "project_name": self.project_name,
            "project_env": self.project_env,
            "stack_trace": self.stack_trace,
            "file": self.file,
            "version_python": self.version_python,
            "version_core": self.version_core,
            "host": self.host,
            "timestamp": self.timestamp,
            "payload": dict(self.payload),
        }

    def to_gelf(self) -> dict[str, Any]:
        """Render the GELF 1.1 message dictionary.

        Examples
        --------
        >>> record = GelfRecord(
        ...     short_message="boom", full_message="boom", level=Severity.ERROR,
        ...     project_name="shop", project_env="test", stack_trace="", file=None,
        ...     version_python="3.12.0", version_core="1.0.0", host="api01",
        ...     timestamp=1.5, payload={"order": 7, "id": "x"},
        ... )
        >>> gelf = record.to_gelf()
        >>> gelf["level"], gelf["_severity"], gelf["_order"], gelf["_payload_id"]
        (3, 'error', 7, 'x')
        >>> "_file" in gelf
        False
        """

        message: dict[str, Any] = {
            "version": GELF_VERSION,
            "host": self.host,
            "short_message": self.short_message,
            "full_message": self.full_message,
            "timestamp": self.timestamp,
            "level": self.level.syslog_level,
            "_severity": self.level.value,
            "_project_name": self.project_name,
            "_project_env": self.project_env,
            "_stack_trace": self.stack_trace,
            "_version_python": self.version_python,
        }
        if self.file is not None:
            message["_file"] = self.file
        if self.version_core is not None:
            message["_version_core"] = self.version_core
        for key, value in self.payload.items():
            message[f"_{_field_name(key)}"] = _flatten_value(value)
        return message

    def to_json(self) -> str:
        """Serialise :meth:`to_gelf` output with sorted keys."""

        return json.dumps(self.to_gelf(), sort_keys=True, default=str)


def _field_name(key: str) -> str:
    """Map a payload key onto a legal GELF additional-field name.

    Examples
    --------
    >>> _field_name("user id"), _field_name("id"), _field_name("")
    ('user_id', 'payload_id', 'payload')
    """

    if not key:
        return "payload"
    name = _ILLEGAL_FIELD_CHARS.sub("_", key)
    return f"payload_{name}" if name in _FORBIDDEN_PAYLOAD_KEYS else name


def _flatten_value(value: Any) -> Any:
    # GELF additional fields hold strings or numbers only
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (str, int, float)):
        return value
    return json.dumps(value, sort_keys=True, default=str)


__all__ = ["GELF_VERSION", "GelfRecord", "RESERVED_FIELDS"]
