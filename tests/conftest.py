from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

import lib_graylog_sendgrid
from lib_graylog_sendgrid.domain.record import GelfRecord
from lib_graylog_sendgrid.domain.errors import TransportError


class RecordingTransport:
    """In-memory GELF transport capturing emitted records."""

    def __init__(self, **settings: Any) -> None:
        self.settings = settings
        self.records: list[GelfRecord] = []
        self.observers: list[Any] = []
        self.closed = False

    def emit(self, record: GelfRecord) -> None:
        self.records.append(record)

    def on_error(self, observer: Any) -> None:
        self.observers.append(observer)

    def close(self) -> None:
        self.closed = True

    def fail(self, message: str) -> None:
        for observer in self.observers:
            observer(TransportError(message))


class TransportFactory:
    def __init__(self) -> None:
        self.created: list[RecordingTransport] = []

    def __call__(self, **settings: Any) -> RecordingTransport:
        transport = RecordingTransport(**settings)
        self.created.append(transport)
        return transport


@pytest.fixture
def transport_factory() -> TransportFactory:
    return TransportFactory()


@pytest.fixture(autouse=True)
def _reset_default_clients() -> Iterator[None]:
    yield
    lib_graylog_sendgrid.shutdown()
