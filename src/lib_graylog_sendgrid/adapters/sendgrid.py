"""SendGrid v3 adapter posting mail bodies through :mod:`httpx`."""

from __future__ import annotations

from typing import Any

import httpx

from lib_graylog_sendgrid.application.ports.mail import MailTransportPort
from lib_graylog_sendgrid.domain.errors import MailDeliveryError

SENDGRID_BASE_URL = "https://api.sendgrid.com"
MAIL_SEND_PATH = "/v3/mail/send"


class SendGridAdapter(MailTransportPort):
    """Deliver mail bodies to ``POST /v3/mail/send`` with a bearer token.

    Retries and authentication policy beyond the bearer header belong to the
    HTTP client; pass a preconfigured ``client`` to change them.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = SENDGRID_BASE_URL,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def deliver(self, body: dict[str, Any]) -> str | None:
        """Post ``body`` and return SendGrid's ``X-Message-Id`` header."""
        try:
            response = self._client.post(MAIL_SEND_PATH, json=body, headers=self._headers)
        except httpx.HTTPError as exc:
            raise MailDeliveryError(f"SendGrid request failed: {exc}") from exc
        if response.status_code >= 400:
            raise MailDeliveryError(
                f"SendGrid rejected the mail with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.headers.get("X-Message-Id")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["MAIL_SEND_PATH", "SENDGRID_BASE_URL", "SendGridAdapter"]
