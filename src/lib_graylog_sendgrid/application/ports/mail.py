"""Port describing the HTTP transport used by the mail client."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MailTransportPort(Protocol):
    """Deliver a SendGrid request body and return the provider message id."""

    def deliver(self, body: dict[str, Any]) -> str | None:
        """Post ``body``; raise :class:`MailDeliveryError` on rejection."""

    def close(self) -> None:
        """Release the underlying HTTP client."""


__all__ = ["MailTransportPort"]
