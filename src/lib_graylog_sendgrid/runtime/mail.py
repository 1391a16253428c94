"""SendGrid mail client and its module-level ``init``/``send`` facade."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from threading import RLock
from typing import Any

from lib_graylog_sendgrid.application.ports import MailTransportPort
from lib_graylog_sendgrid.application.use_cases.send_mail import LOG_PREFIX, create_send_mail
from lib_graylog_sendgrid.domain import NotInitializedError, ValidationError
from lib_graylog_sendgrid.domain.validation import require_email, require_string

from . import _state
from ._factories import create_mail_transport

logger = logging.getLogger(__name__)

MailTransportFactory = Callable[..., MailTransportPort]


class MailClient:
    """Validate and post transactional mail through SendGrid.

    ``project_name``/``project_env`` are attached to every message as SendGrid
    ``custom_args`` when given, so delivery events can be correlated with the
    Graylog records of the same service.
    """

    def __init__(
        self,
        api_key: Any = None,
        default_sender: str | None = None,
        *,
        project_name: str | None = None,
        project_env: str | None = None,
        base_url: str | None = None,
        transport_factory: MailTransportFactory = create_mail_transport,
    ) -> None:
        self._project_name = project_name
        self._project_env = project_env
        self._base_url = base_url
        self._transport_factory = transport_factory
        self._transport: MailTransportPort | None = None
        self._send: Callable[..., str | None] | None = None
        self._lock = RLock()
        if api_key is not None:
            self.init(api_key, default_sender)

    def init(self, api_key: Any, default_sender: str | None = None) -> None:
        """Store the API key and open the HTTP client, replacing any previous one."""

        try:
            checked_key = require_string("api_key", api_key)
            checked_sender = require_email("default_sender", default_sender) if default_sender is not None else None
        except ValidationError as exc:
            logger.error("%s %s is not correct: %s", LOG_PREFIX, exc.field, exc.reason)
            raise
        kwargs: dict[str, Any] = {"api_key": checked_key}
        if self._base_url is not None:
            kwargs["base_url"] = self._base_url
        transport = self._transport_factory(**kwargs)
        base_custom_args = {
            key: value
            for key, value in (("project_name", self._project_name), ("project_env", self._project_env))
            if value
        }
        send = create_send_mail(
            resolve_transport=lambda: transport,
            default_sender=checked_sender,
            base_custom_args=base_custom_args,
        )
        with self._lock:
            previous, self._transport, self._send = self._transport, transport, send
        if previous is not None:
            previous.close()

    def send(
        self,
        to: str | Sequence[str],
        subject: str,
        text: str | None = None,
        html: str | None = None,
        *,
        sender: str | None = None,
        categories: Sequence[str] | None = None,
        custom_args: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Send one mail and return SendGrid's message id.

        Raises
        ------
        ValidationError
            When recipients, subject, body, or sender are invalid.
        MailDeliveryError
            When SendGrid rejects the request or cannot be reached.
        NotInitializedError
            When :meth:`init` has not run.
        """

        with self._lock:
            send = self._send
        if send is None:
            raise NotInitializedError("MailClient.init() must be called before send()")
        return send(to, subject, text, html, sender=sender, categories=categories, custom_args=custom_args)

    def is_initialised(self) -> bool:
        with self._lock:
            return self._send is not None

    def close(self) -> None:
        with self._lock:
            transport, self._transport, self._send = self._transport, None, None
        if transport is not None:
            transport.close()


def init(api_key: Any, default_sender: str | None = None, **options: Any) -> MailClient:
    """Install a new default :class:`MailClient`, closing the previous one."""

    client = MailClient(**options)
    client.init(api_key, default_sender)
    previous = _state.set_mail_client(client)
    if previous is not None:
        previous.close()
    return client


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
    """Send through the default client installed by :func:`init`."""

    return _state.current_mail_client().send(
        to, subject, text, html, sender=sender, categories=categories, custom_args=custom_args
    )


def shutdown() -> None:
    client = _state.take_mail_client()
    if client is not None:
        client.close()


def is_initialised() -> bool:
    try:
        return _state.current_mail_client().is_initialised()
    except NotInitializedError:
        return False


__all__ = ["MailClient", "init", "is_initialised", "send", "shutdown"]
