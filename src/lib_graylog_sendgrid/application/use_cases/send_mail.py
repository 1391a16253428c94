"""Use case validating and dispatching one transactional mail.

Unlike the Graylog dispatcher this path is synchronous: the SendGrid answer is
awaited and a rejection surfaces as :class:`MailDeliveryError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from lib_graylog_sendgrid.application.ports import MailTransportPort
from lib_graylog_sendgrid.domain import MailDeliveryError, MailMessage, ValidationError
from lib_graylog_sendgrid.domain.validation import (
    require_categories,
    require_custom_args,
    require_email,
    require_recipients,
    require_string,
)

logger = logging.getLogger(__name__)

LOG_PREFIX = "[SENDGRID]"

SendMailCallable = Callable[..., "str | None"]


def build_mail(
    *,
    to: str | Sequence[str],
    subject: str,
    text: str | None = None,
    html: str | None = None,
    sender: str | None = None,
    default_sender: str | None = None,
    categories: Sequence[str] | None = None,
    custom_args: Mapping[str, Any] | None = None,
    base_custom_args: Mapping[str, str] | None = None,
) -> MailMessage:
    """Validate mail arguments in documented order and return a :class:`MailMessage`.

    ``base_custom_args`` sit beneath the caller's ``custom_args``.
    """

    recipients = require_recipients("to", to)
    checked_subject = require_string("subject", subject)
    if text is None and html is None:
        raise ValidationError("body", "requires text or html content")
    if text is not None:
        require_string("text", text)
    if html is not None:
        require_string("html", html)
    resolved_sender = require_email("sender", sender if sender is not None else default_sender)
    checked_categories = require_categories(categories)
    checked_custom_args = {**dict(base_custom_args or {}), **require_custom_args(custom_args)}
    return MailMessage(
        to=tuple(recipients),
        sender=resolved_sender,
        subject=checked_subject,
        text=text,
        html=html,
        categories=checked_categories,
        custom_args=checked_custom_args,
    )


def create_send_mail(
    *,
    resolve_transport: Callable[[], MailTransportPort],
    default_sender: str | None = None,
    base_custom_args: Mapping[str, str] | None = None,
) -> SendMailCallable:
    """Return the ``send`` callable bound to the configured transport.

    ``base_custom_args`` (project name/environment) are merged beneath the
    caller's own ``custom_args`` so SendGrid events can be attributed.
    """

    defaults = dict(base_custom_args or {})

    def send(
        to: str | Sequence[str],
        subject: str,
        text: str | None = None,
        html: str | None = None,
        *,
        sender: str | None = None,
        categories: Sequence[str] | None = None,
        custom_args: Mapping[str, Any] | None = None,
    ) -> str | None:
        try:
            message = build_mail(
                to=to,
                subject=subject,
                text=text,
                html=html,
                sender=sender,
                default_sender=default_sender,
                categories=categories,
                custom_args=custom_args,
                base_custom_args=defaults,
            )
        except ValidationError as exc:
            logger.error("%s %s is not correct: %s", LOG_PREFIX, exc.field, exc.reason)
            raise
        transport = resolve_transport()
        try:
            message_id = transport.deliver(message.to_sendgrid())
        except MailDeliveryError as exc:
            logger.error("%s Error: %s", LOG_PREFIX, exc)
            raise
        logger.info("%s Mail accepted for %d recipient(s)", LOG_PREFIX, len(message.to))
        return message_id

    return send


__all__ = ["LOG_PREFIX", "build_mail", "create_send_mail"]
