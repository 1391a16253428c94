"""Use case orchestrating a single Graylog ``send`` call.

Purpose
-------
Tie together validation, truncation, caller-context extraction, and record
construction, then hand the record to the connection's transport.

Contents
--------
* :func:`create_dispatch` factory returning the runtime callable.
* :class:`DispatchCallable` describing the callable's contract.

System Role
-----------
Application-layer orchestrator invoked by the Graylog client. The connection
is resolved through a callable so every ``send`` reads exactly one snapshot of
the state installed by the most recent ``init``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from lib_graylog_sendgrid.application.ports import ClockPort, ConnectionView
from lib_graylog_sendgrid.domain import GelfRecord, Severity, ValidationError, truncate
from lib_graylog_sendgrid.domain.caller import CallerContext, extract_caller_context
from lib_graylog_sendgrid.domain.validation import validate_graylog_send

logger = logging.getLogger(__name__)

LOG_PREFIX = "[GRAYLOG]"


class DispatchCallable(Protocol):
    def __call__(
        self,
        message: str,
        severity: Severity | str = ...,
        short_message: str | None = ...,
        payload: Mapping[str, Any] | None = ...,
    ) -> None: ...

    def build_record(
        self,
        message: str,
        severity: Severity | str = ...,
        short_message: str | None = ...,
        payload: Mapping[str, Any] | None = ...,
    ) -> GelfRecord: ...


def create_dispatch(
    *,
    resolve_connection: Callable[[], ConnectionView],
    clock: ClockPort,
    host: str,
    python_version: str,
    extract_context: Callable[[], CallerContext] = extract_caller_context,
) -> DispatchCallable:
    """Build the dispatcher capturing the current dependency wiring.

    Parameters
    ----------
    resolve_connection:
        Returns the active connection; raises
        :class:`~lib_graylog_sendgrid.domain.errors.NotInitializedError` when
        ``init`` has not run.
    clock:
        Provider of timezone-aware timestamps.
    host:
        Value for the GELF ``host`` field.
    python_version:
        Runtime version recorded on every record.
    extract_context:
        Caller-context extractor; replaceable in tests.

    Returns
    -------
    DispatchCallable
        ``send``-shaped callable returning ``None``. It validates, builds the
        record, and emits it without waiting for delivery.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> class Transport:
    ...     def __init__(self):
    ...         self.records = []
    ...     def emit(self, record):
    ...         self.records.append(record)
    ...     def on_error(self, observer):
    ...         pass
    ...     def close(self):
    ...         pass
    >>> class Connection:
    ...     project_name = "shop"
    ...     project_env = "test"
    ...     version_core = "1.2.3"
    ...     transport = Transport()
    >>> class Clock:
    ...     def now(self):
    ...         return datetime(2025, 1, 1, tzinfo=timezone.utc)
    >>> connection = Connection()
    >>> send = create_dispatch(
    ...     resolve_connection=lambda: connection, clock=Clock(), host="api01",
    ...     python_version="3.12.0",
    ... )
    >>> send("a" * 60, "warn") is None
    True
    >>> record = connection.transport.records[0]
    >>> record.short_message == "a" * 50 + "...", record.level.value
    (True, 'warn')
    """

    toolkit = _DispatchToolkit(
        resolve_connection=resolve_connection,
        clock=clock,
        host=host,
        python_version=python_version,
        extract_context=extract_context,
    )
    return _DispatchPipeline(toolkit)


@dataclass(frozen=True)
class _DispatchToolkit:
    resolve_connection: Callable[[], ConnectionView]
    clock: ClockPort
    host: str
    python_version: str
    extract_context: Callable[[], CallerContext]


class _DispatchPipeline:
    def __init__(self, toolkit: _DispatchToolkit) -> None:
        self._toolkit = toolkit

    def __call__(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        short_message: str | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        connection, record = _craft_record(self._toolkit, message, severity, short_message, payload)
        connection.transport.emit(record)

    def build_record(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        short_message: str | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> GelfRecord:
        _connection, record = _craft_record(self._toolkit, message, severity, short_message, payload)
        return record


def _craft_record(
    toolkit: _DispatchToolkit,
    message: Any,
    severity: Any,
    short_message: Any,
    payload: Any,
) -> tuple[ConnectionView, GelfRecord]:
    checked_message, checked_severity, checked_short, checked_payload = validate_send(message, severity, short_message, payload)
    connection = toolkit.resolve_connection()
    context = toolkit.extract_context()
    record = GelfRecord(
        short_message=truncate(checked_short),
        full_message=checked_message,
        level=checked_severity,
        project_name=connection.project_name,
        project_env=connection.project_env,
        stack_trace=context.stack_trace,
        file=context.file,
        version_python=toolkit.python_version,
        version_core=connection.version_core,
        host=toolkit.host,
        timestamp=toolkit.clock.now().timestamp(),
        payload=checked_payload,
    )
    return connection, record


def validate_send(message: Any, severity: Any, short_message: Any, payload: Any) -> tuple[str, Severity, str, dict[str, Any]]:
    """Validate ``send`` arguments, logging the offending field before re-raising."""
    try:
        return validate_graylog_send(message, severity, short_message, payload)
    except ValidationError as exc:
        logger.error("%s %s is not correct: %s", LOG_PREFIX, exc.field, exc.reason)
        raise


__all__ = ["DispatchCallable", "LOG_PREFIX", "create_dispatch", "validate_send"]
