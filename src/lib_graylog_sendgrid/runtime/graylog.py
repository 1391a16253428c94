"""Graylog client owning one connection snapshot and its GELF transport.

Purpose
-------
Provide the explicit object behind the module-level ``init``/``send`` facade.
Each client validates its configuration, builds a fire-and-forget transport,
and hands every ``send`` a single consistent :class:`GraylogConnection`.

Contents
--------
* :class:`GraylogClient` - ``init``/``send``/``build_record``/``close``.

System Role
-----------
Composition root for the Graylog path: wires the clock, host identity, caller
context extractor, and transport factory into the dispatch use case.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from threading import RLock
from typing import Any

from lib_graylog_sendgrid.application.ports import ClockPort, GelfTransportPort
from lib_graylog_sendgrid.application.use_cases.dispatch import LOG_PREFIX, create_dispatch
from lib_graylog_sendgrid.domain import GelfRecord, NotInitializedError, Severity, TransportError, ValidationError
from lib_graylog_sendgrid.domain.validation import validate_graylog_init

from ._factories import (
    DEFAULT_CORE_DISTRIBUTION,
    SystemClock,
    create_gelf_transport,
    resolve_core_version,
    resolve_host,
    resolve_python_version,
)
from ._state import GraylogConnection

logger = logging.getLogger(__name__)

TransportFactory = Callable[..., GelfTransportPort]


class GraylogClient:
    """Send enriched GELF records to one Graylog input.

    Parameters
    ----------
    hostname, port, project_name, project_env:
        Connection settings. When all four are omitted the client starts
        uninitialised and :meth:`init` must be called before :meth:`send`.
    connection:
        ``"wan"`` (TCP with reconnect, the default), ``"lan"`` (UDP), or an
        explicit ``"tcp"``/``"udp"``.
    use_tls:
        Wrap the TCP connection in TLS.
    core_distribution:
        Distribution whose version is recorded as ``version_core``.
    transport_factory:
        Builds the transport from ``host``, ``port``, ``connection`` and
        ``use_tls`` keywords; tests pass in-memory fakes.

    Examples
    --------
    >>> class Transport:
    ...     def __init__(self):
    ...         self.records = []
    ...     def emit(self, record):
    ...         self.records.append(record)
    ...     def on_error(self, observer):
    ...         pass
    ...     def close(self):
    ...         pass
    >>> transport = Transport()
    >>> client = GraylogClient(
    ...     "graylog.local", 12201, "shop", "test",
    ...     transport_factory=lambda **_: transport, core_distribution=None,
    ... )
    >>> client.send("hello")
    >>> transport.records[0].project_name
    'shop'
    >>> client.close()
    >>> client.is_initialised()
    False
    """

    def __init__(
        self,
        hostname: Any = None,
        port: Any = None,
        project_name: Any = None,
        project_env: Any = None,
        *,
        connection: str = "wan",
        use_tls: bool = False,
        core_distribution: str | None = DEFAULT_CORE_DISTRIBUTION,
        transport_factory: TransportFactory = create_gelf_transport,
        clock: ClockPort | None = None,
        host: str | None = None,
    ) -> None:
        self._connection_profile = connection
        self._use_tls = use_tls
        self._core_distribution = core_distribution
        self._transport_factory = transport_factory
        self._state: GraylogConnection | None = None
        self._lock = RLock()
        self._dispatch = create_dispatch(
            resolve_connection=self._snapshot,
            clock=clock or SystemClock(),
            host=host or resolve_host(),
            python_version=resolve_python_version(),
        )
        if any(value is not None for value in (hostname, port, project_name, project_env)):
            self.init(hostname, port, project_name, project_env)

    def init(self, hostname: Any, port: Any, project_name: Any, project_env: Any) -> None:
        """Validate settings, open the transport, and replace any previous state.

        Raises
        ------
        ValidationError
            For the first of hostname, port, project name, project env that is
            missing, mistyped, or empty. The previous state stays active.
        """

        try:
            checked_host, checked_port, checked_name, checked_env = validate_graylog_init(hostname, port, project_name, project_env)
        except ValidationError as exc:
            logger.error("%s %s is not correct: %s", LOG_PREFIX, exc.field, exc.reason)
            raise

        transport = self._transport_factory(
            host=checked_host,
            port=checked_port,
            connection=self._connection_profile,
            use_tls=self._use_tls,
        )
        transport.on_error(_log_transport_error)
        state = GraylogConnection(
            hostname=checked_host,
            port=checked_port,
            project_name=checked_name,
            project_env=checked_env,
            version_core=resolve_core_version(self._core_distribution),
            transport=transport,
        )
        with self._lock:
            previous, self._state = self._state, state
        if previous is not None:
            _close_transport(previous.transport)
        logger.info("%s Connection Initialized", LOG_PREFIX)

    def send(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        short_message: str | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        """Validate, enrich, and enqueue one record; returns before delivery."""

        self._dispatch(message, severity, short_message, payload)

    def build_record(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        short_message: str | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> GelfRecord:
        """Return the record ``send`` would emit, without emitting it."""

        return self._dispatch.build_record(message, severity, short_message, payload)

    @property
    def connection(self) -> GraylogConnection:
        return self._snapshot()

    def is_initialised(self) -> bool:
        with self._lock:
            return self._state is not None

    def close(self) -> None:
        """Drain and close the transport; later ``send`` calls raise."""

        with self._lock:
            state, self._state = self._state, None
        if state is not None:
            _close_transport(state.transport)

    def _snapshot(self) -> GraylogConnection:
        with self._lock:
            if self._state is None:
                raise NotInitializedError("GraylogClient.init() must be called before send()")
            return self._state


def _log_transport_error(error: TransportError) -> None:
    logger.error("%s Error: %s", LOG_PREFIX, error)


def _close_transport(transport: GelfTransportPort) -> None:
    try:
        transport.close()
    except (OSError, RuntimeError) as exc:
        logger.error("%s Error: failed to close transport: %s", LOG_PREFIX, exc)


__all__ = ["GraylogClient", "TransportFactory"]
