"""GELF transport adapters speaking TCP, TLS, or chunked UDP to Graylog.

Purpose
-------
Deliver :class:`GelfRecord` instances to a Graylog input without ever raising
into the caller. Failures become :class:`TransportError` values delivered to
registered error observers.

Contents
--------
* :data:`CONNECTION_PROFILES` - ``"wan"``/``"lan"`` profile to protocol map.
* :class:`GelfTransport` - synchronous socket sender (TCP reuse + reconnect,
  optional TLS, UDP chunking with optional zlib compression).
* :class:`QueuedGelfTransport` - fire-and-forget wrapper running a
  :class:`GelfTransport` on a :class:`QueueAdapter` worker thread.

System Role
-----------
Concrete implementations of :class:`GelfTransportPort` built by the Graylog
client during ``init``.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import ssl
import threading
import zlib
from typing import Any

from lib_graylog_sendgrid.application.ports.gelf import ErrorObserver, GelfTransportPort
from lib_graylog_sendgrid.domain.errors import TransportError
from lib_graylog_sendgrid.domain.record import GelfRecord

from .queue import QueueAdapter

LOGGER = logging.getLogger(__name__)

CONNECTION_PROFILES = {"wan": "tcp", "lan": "udp"}
#: ``wan`` selects the most reliable delivery mode (TCP with reconnect).

GELF_CHUNK_MAGIC = b"\x1e\x0f"
GELF_MAX_CHUNKS = 128
DEFAULT_CHUNK_SIZE = 1420


def resolve_protocol(connection: str) -> str:
    """Map a connection profile (or explicit protocol) to ``"tcp"``/``"udp"``.

    Examples
    --------
    >>> resolve_protocol("wan"), resolve_protocol("UDP")
    ('tcp', 'udp')
    """

    normalized = connection.strip().lower()
    protocol = CONNECTION_PROFILES.get(normalized, normalized)
    if protocol not in {"tcp", "udp"}:
        raise ValueError(f"Unsupported GELF connection: {connection!r}")
    return protocol


def encode_record(record: GelfRecord) -> bytes:
    """Serialise ``record`` as compact UTF-8 JSON."""

    return json.dumps(record.to_gelf(), ensure_ascii=False, separators=(",", ":"), default=str).encode("utf-8")


def split_chunks(data: bytes, *, chunk_size: int = DEFAULT_CHUNK_SIZE, message_id: bytes | None = None) -> list[bytes]:
    """Split ``data`` into GELF UDP chunks; small payloads are returned as-is.

    Examples
    --------
    >>> split_chunks(b"tiny")
    [b'tiny']
    >>> chunks = split_chunks(b"x" * 10, chunk_size=4, message_id=b"12345678")
    >>> len(chunks), chunks[0][:12]
    (3, b'\\x1e\\x0f12345678\\x00\\x03')
    """

    if len(data) <= chunk_size:
        return [data]
    pieces = [data[offset : offset + chunk_size] for offset in range(0, len(data), chunk_size)]
    if len(pieces) > GELF_MAX_CHUNKS:
        raise TransportError(f"GELF message needs {len(pieces)} chunks; the limit is {GELF_MAX_CHUNKS}")
    identifier = message_id if message_id is not None else os.urandom(8)
    total = len(pieces)
    return [GELF_CHUNK_MAGIC + identifier + bytes((index, total)) + piece for index, piece in enumerate(pieces)]


class _ObserverMixin:
    _observers: list[ErrorObserver]

    def on_error(self, observer: ErrorObserver) -> None:
        """Register ``observer`` for delivery failures."""
        self._observers.append(observer)

    def _report(self, error: TransportError) -> None:
        if not self._observers:
            LOGGER.error("GELF delivery failed: %s", error)
            return
        for observer in list(self._observers):
            try:
                observer(error)
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("GELF error observer raised; continuing", exc_info=exc)


class GelfTransport(_ObserverMixin, GelfTransportPort):
    """Send GELF records over TCP (null-byte framed), TLS, or UDP."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        protocol: str = "tcp",
        use_tls: bool = False,
        timeout: float = 1.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        compress: bool = False,
    ) -> None:
        """Configure the destination without opening a connection yet.

        Raises
        ------
        ValueError
            For unknown protocols or TLS combined with UDP.
        """
        resolved = resolve_protocol(protocol)
        if use_tls and resolved == "udp":
            raise ValueError("TLS is only supported with the TCP protocol")
        self._host = host
        self._port = port
        self._protocol = resolved
        self._use_tls = use_tls
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._compress = compress
        self._observers = []
        self._socket: Any = None
        self._lock = threading.Lock()

    @property
    def endpoint(self) -> tuple[str, int]:
        return self._host, self._port

    @property
    def protocol(self) -> str:
        return self._protocol

    def emit(self, record: GelfRecord) -> None:
        """Deliver ``record`` synchronously; failures go to the observers."""
        try:
            data = encode_record(record)
            if self._protocol == "udp":
                self._send_udp(data)
            else:
                self._send_tcp(data + b"\x00")
        except TransportError as error:
            self._report(error)
        except (OSError, ValueError) as exc:
            self._report(TransportError(f"{type(exc).__name__}: {exc}", cause=exc))

    def close(self) -> None:
        """Close the cached TCP connection, if any."""
        with self._lock:
            self._close_socket()

    def _send_tcp(self, frame: bytes) -> None:
        with self._lock:
            for attempt in (1, 2):
                connection = self._connection()
                try:
                    connection.sendall(frame)
                    return
                except OSError:
                    self._close_socket()
                    if attempt == 2:
                        raise

    def _connection(self) -> Any:
        if self._socket is None:
            sock = socket.create_connection((self._host, self._port), timeout=self._timeout)
            if self._use_tls:
                context = ssl.create_default_context()
                sock = context.wrap_socket(sock, server_hostname=self._host)
            sock.settimeout(self._timeout)
            self._socket = sock
        return self._socket

    def _close_socket(self) -> None:
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError as exc:
            LOGGER.debug("Ignoring error while closing GELF socket: %s", exc)

    def _send_udp(self, data: bytes) -> None:
        payload = zlib.compress(data) if self._compress else data
        chunks = split_chunks(payload, chunk_size=self._chunk_size)
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(self._timeout)
            for chunk in chunks:
                sock.sendto(chunk, (self._host, self._port))


class QueuedGelfTransport(_ObserverMixin, GelfTransportPort):
    """Fire-and-forget wrapper: ``emit`` enqueues and returns immediately.

    Delivery is best-effort and at-most-once; there is no acknowledgement.
    Records rejected by a full queue are reported to the error observers.
    """

    def __init__(
        self,
        inner: GelfTransport,
        *,
        maxsize: int = 2048,
        stop_timeout: float | None = 5.0,
    ) -> None:
        self._inner = inner
        self._observers = []
        inner.on_error(self._report)
        self._queue: QueueAdapter[GelfRecord] = QueueAdapter(
            worker=inner.emit,
            maxsize=maxsize,
            drop_policy="drop",
            on_drop=self._record_dropped,
            on_worker_error=self._worker_failed,
            stop_timeout=stop_timeout,
        )
        self._queue.start()

    @property
    def inner(self) -> GelfTransport:
        return self._inner

    def emit(self, record: GelfRecord) -> None:
        self._queue.put(record)

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until queued records were handed to the socket (test helper)."""
        return self._queue.wait_until_idle(timeout)

    def close(self) -> None:
        """Drain queued records, then close the inner transport."""
        try:
            self._queue.stop(drain=True)
        finally:
            self._inner.close()

    def _record_dropped(self, _record: GelfRecord) -> None:
        self._report(TransportError("GELF queue full; record dropped"))

    def _worker_failed(self, _record: GelfRecord, exc: Exception) -> None:
        self._report(TransportError(f"{type(exc).__name__}: {exc}", cause=exc))


__all__ = [
    "CONNECTION_PROFILES",
    "GelfTransport",
    "QueuedGelfTransport",
    "encode_record",
    "resolve_protocol",
    "split_chunks",
]
