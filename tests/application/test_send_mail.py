from __future__ import annotations

import logging
from typing import Any

import pytest

from lib_graylog_sendgrid.application.use_cases.send_mail import build_mail, create_send_mail
from lib_graylog_sendgrid.domain import MailDeliveryError, ValidationError


class _RecordingMail:
    def __init__(self, *, error: MailDeliveryError | None = None) -> None:
        self.bodies: list[dict[str, Any]] = []
        self.error = error

    def deliver(self, body: dict[str, Any]) -> str | None:
        self.bodies.append(body)
        if self.error is not None:
            raise self.error
        return "msg-1"

    def close(self) -> None:
        pass


def _field_of(**kwargs: Any) -> str:
    defaults: dict[str, Any] = {"to": "ops@example.com", "subject": "Report", "text": "ok", "sender": "noreply@example.com"}
    defaults.update(kwargs)
    with pytest.raises(ValidationError) as excinfo:
        build_mail(**defaults)
    return excinfo.value.field


def test_build_mail_checks_run_in_documented_order() -> None:
    assert _field_of(to=None, subject=None) == "to"
    assert _field_of(subject="", text=None) == "subject"
    assert _field_of(text=None, html=None, sender=None) == "body"
    assert _field_of(text="", sender=None) == "text"
    assert _field_of(text=None, html="") == "html"
    assert _field_of(sender=None) == "sender"
    assert _field_of(sender="not-an-address") == "sender"
    assert _field_of(sender="bad", categories="billing") == "sender"
    assert _field_of(categories="billing", custom_args=[1]) == "categories"
    assert _field_of(custom_args=[1]) == "custom_args"


def test_build_mail_falls_back_to_default_sender() -> None:
    message = build_mail(to="ops@example.com", subject="s", html="<p>x</p>", default_sender="noreply@example.com")

    assert message.sender == "noreply@example.com"
    assert message.text is None


def test_send_merges_base_custom_args_beneath_caller_args() -> None:
    transport = _RecordingMail()
    send = create_send_mail(
        resolve_transport=lambda: transport,
        default_sender="noreply@example.com",
        base_custom_args={"project_name": "checkout", "project_env": "test"},
    )

    message_id = send(["a@example.com"], "Hi", "Hello", custom_args={"project_env": "override", "order": 7})

    assert message_id == "msg-1"
    assert transport.bodies[0]["custom_args"] == {"project_name": "checkout", "project_env": "override", "order": "7"}


def test_send_logs_and_reraises_delivery_errors(caplog: pytest.LogCaptureFixture) -> None:
    transport = _RecordingMail(error=MailDeliveryError("rejected", status_code=401, body="unauthorized"))
    send = create_send_mail(resolve_transport=lambda: transport, default_sender="noreply@example.com")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(MailDeliveryError) as excinfo:
            send("a@example.com", "Hi", "Hello")

    assert excinfo.value.status_code == 401
    assert "[SENDGRID] Error: rejected" in caplog.text


def test_send_does_not_reach_transport_on_validation_error() -> None:
    transport = _RecordingMail()
    send = create_send_mail(resolve_transport=lambda: transport)

    with pytest.raises(ValidationError):
        send("a@example.com", "Hi", "Hello")

    assert transport.bodies == []


def test_send_rejects_a_bare_category_string(caplog: pytest.LogCaptureFixture) -> None:
    transport = _RecordingMail()
    send = create_send_mail(resolve_transport=lambda: transport, default_sender="noreply@example.com")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ValidationError):
            send("a@example.com", "Hi", "Hello", categories="billing")

    assert "[SENDGRID] categories is not correct: must be a list of strings" in caplog.text
    assert transport.bodies == []


def test_send_logs_non_mapping_custom_args_as_validation_errors(caplog: pytest.LogCaptureFixture) -> None:
    transport = _RecordingMail()
    send = create_send_mail(
        resolve_transport=lambda: transport,
        default_sender="noreply@example.com",
        base_custom_args={"project_name": "checkout"},
    )

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ValidationError) as excinfo:
            send("a@example.com", "Hi", "Hello", custom_args=[("order", 7)])

    assert excinfo.value.field == "custom_args"
    assert "[SENDGRID] custom_args is not correct: must be a mapping" in caplog.text
    assert transport.bodies == []


def test_send_passes_categories_through() -> None:
    transport = _RecordingMail()
    send = create_send_mail(resolve_transport=lambda: transport, default_sender="noreply@example.com")

    send("a@example.com", "Hi", "Hello", categories=["billing", "alerts"])

    assert transport.bodies[0]["categories"] == ["billing", "alerts"]
