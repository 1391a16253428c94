"""Concrete adapters implementing the application ports."""

from __future__ import annotations

from .gelf import CONNECTION_PROFILES, GelfTransport, QueuedGelfTransport
from .queue import QueueAdapter
from .sendgrid import SendGridAdapter

__all__ = [
    "CONNECTION_PROFILES",
    "GelfTransport",
    "QueueAdapter",
    "QueuedGelfTransport",
    "SendGridAdapter",
]
