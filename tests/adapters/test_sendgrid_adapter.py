from __future__ import annotations

import json

import httpx
import pytest

from lib_graylog_sendgrid.adapters.sendgrid import MAIL_SEND_PATH, SendGridAdapter
from lib_graylog_sendgrid.domain.errors import MailDeliveryError

BODY = {
    "personalizations": [{"to": [{"email": "ops@example.com"}]}],
    "from": {"email": "noreply@example.com"},
    "subject": "Report",
    "content": [{"type": "text/plain", "value": "all green"}],
}


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url="https://api.sendgrid.test", transport=httpx.MockTransport(handler))


def test_deliver_posts_body_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, headers={"X-Message-Id": "abc123"})

    adapter = SendGridAdapter(api_key="SG.secret", client=_client(handler))

    message_id = adapter.deliver(BODY)

    assert message_id == "abc123"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == MAIL_SEND_PATH
    assert request.headers["Authorization"] == "Bearer SG.secret"
    assert json.loads(request.content) == BODY


def test_missing_message_id_header_returns_none() -> None:
    adapter = SendGridAdapter(api_key="SG.secret", client=_client(lambda request: httpx.Response(202)))

    assert adapter.deliver(BODY) is None


def test_error_status_raises_mail_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": [{"message": "authorization required"}]})

    adapter = SendGridAdapter(api_key="SG.wrong", client=_client(handler))

    with pytest.raises(MailDeliveryError) as excinfo:
        adapter.deliver(BODY)

    assert excinfo.value.status_code == 401
    assert "authorization required" in (excinfo.value.body or "")


def test_network_failure_raises_mail_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    adapter = SendGridAdapter(api_key="SG.secret", client=_client(handler))

    with pytest.raises(MailDeliveryError, match="connection refused") as excinfo:
        adapter.deliver(BODY)

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_close_leaves_injected_clients_open() -> None:
    client = _client(lambda request: httpx.Response(202))
    adapter = SendGridAdapter(api_key="SG.secret", client=client)

    adapter.close()

    assert client.is_closed is False
    client.close()


def test_close_releases_owned_client() -> None:
    adapter = SendGridAdapter(api_key="SG.secret")

    adapter.close()

    assert adapter._client.is_closed is True
