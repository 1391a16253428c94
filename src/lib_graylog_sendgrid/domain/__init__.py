"""Domain entities, value objects, and pure helpers used by both clients."""

from __future__ import annotations

from .caller import CallerContext, extract_caller_context
from .errors import MailDeliveryError, NotInitializedError, RelayError, TransportError, ValidationError
from .levels import Severity
from .mail import MailMessage
from .record import GelfRecord
from .truncate import truncate

__all__ = [
    "CallerContext",
    "GelfRecord",
    "MailDeliveryError",
    "MailMessage",
    "NotInitializedError",
    "RelayError",
    "Severity",
    "TransportError",
    "ValidationError",
    "extract_caller_context",
    "truncate",
]
