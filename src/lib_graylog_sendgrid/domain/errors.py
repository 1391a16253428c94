"""Error taxonomy shared by the Graylog and SendGrid clients.

Validation problems are raised synchronously to the caller; transport problems
of the fire-and-forget GELF path only ever reach the registered error observer.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(RelayError, ValueError):
    """An argument was missing, of the wrong type, empty, or out of range.

    Attributes
    ----------
    field:
        Name of the offending argument as it appears in the public API.
    reason:
        Short human readable explanation (``"is required"``, ``"must be a string"``).
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field} {reason}")


class NotInitializedError(RelayError, RuntimeError):
    """A client was used before ``init`` completed (or after ``shutdown``)."""


class TransportError(RelayError):
    """Delivery of an emitted GELF record failed inside the transport."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class MailDeliveryError(RelayError):
    """SendGrid rejected a message or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


__all__ = [
    "MailDeliveryError",
    "NotInitializedError",
    "RelayError",
    "TransportError",
    "ValidationError",
]
