"""Protocols separating the use cases from concrete adapters."""

from __future__ import annotations

from .connection import ConnectionView
from .gelf import ErrorObserver, GelfTransportPort
from .mail import MailTransportPort
from .queue import QueuePort
from .time import ClockPort

__all__ = [
    "ClockPort",
    "ConnectionView",
    "ErrorObserver",
    "GelfTransportPort",
    "MailTransportPort",
    "QueuePort",
]
