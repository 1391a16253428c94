"""Transactional mail value object and its SendGrid v3 request body."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class MailMessage:
    """One outbound mail, validated and enriched by the mail client."""

    to: tuple[str, ...]
    sender: str
    subject: str
    text: str | None = None
    html: str | None = None
    categories: tuple[str, ...] = ()
    custom_args: dict[str, str] = field(default_factory=dict)

    def to_sendgrid(self) -> dict[str, Any]:
        """Return the JSON body for ``POST /v3/mail/send``.

        SendGrid requires ``text/plain`` to precede ``text/html`` in ``content``.

        Examples
        --------
        >>> message = MailMessage(to=("a@example.com",), sender="b@example.com", subject="Hi", text="Hello")
        >>> body = message.to_sendgrid()
        >>> body["personalizations"][0]["to"], body["content"][0]["type"]
        ([{'email': 'a@example.com'}], 'text/plain')
        """

        content: list[dict[str, str]] = []
        if self.text is not None:
            content.append({"type": "text/plain", "value": self.text})
        if self.html is not None:
            content.append({"type": "text/html", "value": self.html})
        body: dict[str, Any] = {
            "personalizations": [{"to": [{"email": address} for address in self.to]}],
            "from": {"email": self.sender},
            "subject": self.subject,
            "content": content,
        }
        if self.categories:
            body["categories"] = list(self.categories)
        if self.custom_args:
            body["custom_args"] = dict(self.custom_args)
        return body


__all__ = ["MailMessage"]
