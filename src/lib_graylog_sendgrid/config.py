"""Configuration helpers: ``.env`` loading and environment-backed settings.

Purpose
-------
Let hosts and the CLI configure both clients from the process environment,
optionally seeded from the nearest ``.env`` file via ``python-dotenv``.

Contents
--------
* :func:`enable_dotenv` / :func:`should_use_dotenv` - opt-in ``.env`` loading.
* :class:`GraylogSettings` / :func:`graylog_settings_from_env`.
* :class:`MailSettings` / :func:`mail_settings_from_env`.

System Role
-----------
Environment variables win over explicit fallbacks, matching how deployment
platforms inject configuration. Values are passed through unchanged so the
clients' validators report missing or malformed settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any

from dotenv import find_dotenv, load_dotenv

DOTENV_ENV_VAR = "LIB_GRAYLOG_SENDGRID_USE_DOTENV"

GRAYLOG_HOST = "GRAYLOG_HOST"
GRAYLOG_PORT = "GRAYLOG_PORT"
GRAYLOG_PROJECT_NAME = "GRAYLOG_PROJECT_NAME"
GRAYLOG_PROJECT_ENV = "GRAYLOG_PROJECT_ENV"
GRAYLOG_PROTOCOL = "GRAYLOG_PROTOCOL"
GRAYLOG_TLS = "GRAYLOG_TLS"
SENDGRID_API_KEY = "SENDGRID_API_KEY"
SENDGRID_SENDER = "SENDGRID_SENDER"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_DOTENV_LOCK = Lock()
_DOTENV_LOADED: Path | None = None
_DOTENV_ATTEMPTED = False


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` once per process without overriding the environment.

    Returns
    -------
    Path | None
        Resolved path of the loaded file, or ``None`` when none was found.
    """

    global _DOTENV_LOADED, _DOTENV_ATTEMPTED
    with _DOTENV_LOCK:
        if _DOTENV_ATTEMPTED:
            return _DOTENV_LOADED
        _DOTENV_ATTEMPTED = True
        if search_from is not None:
            candidate = _search_upwards(search_from)
        else:
            found = find_dotenv(usecwd=True)
            candidate = Path(found).resolve() if found else None
        if candidate is None:
            return None
        load_dotenv(candidate, override=False)
        _DOTENV_LOADED = candidate
        return candidate


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether to load ``.env``; an explicit flag beats the environment toggle.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    value = env_value if env_value is not None else os.getenv(DOTENV_ENV_VAR)
    return _parse_bool(value, default=False)


@dataclass(frozen=True)
class GraylogSettings:
    hostname: Any
    port: Any
    project_name: Any
    project_env: Any
    connection: str = "wan"
    use_tls: bool = False

    def init_kwargs(self) -> dict[str, Any]:
        """Keyword arguments accepted by :func:`lib_graylog_sendgrid.init`."""
        return {
            "hostname": self.hostname,
            "port": self.port,
            "project_name": self.project_name,
            "project_env": self.project_env,
            "connection": self.connection,
            "use_tls": self.use_tls,
        }


@dataclass(frozen=True)
class MailSettings:
    api_key: Any
    default_sender: str | None = None


def graylog_settings_from_env(
    *,
    hostname: str | None = None,
    port: int | None = None,
    project_name: str | None = None,
    project_env: str | None = None,
    connection: str = "wan",
    use_tls: bool = False,
) -> GraylogSettings:
    """Return Graylog settings from ``GRAYLOG_*`` variables, falling back to arguments.

    ``GRAYLOG_PORT`` is converted to ``int`` when it holds digits; anything
    else is passed through so ``init`` can report it.

    Examples
    --------
    >>> settings = graylog_settings_from_env(hostname="fallback", port=12201, project_name="p", project_env="test")
    >>> isinstance(settings.port, int)
    True
    """

    raw_port = os.getenv(GRAYLOG_PORT)
    return GraylogSettings(
        hostname=os.getenv(GRAYLOG_HOST, hostname),
        port=_parse_port(raw_port) if raw_port is not None else port,
        project_name=os.getenv(GRAYLOG_PROJECT_NAME, project_name),
        project_env=os.getenv(GRAYLOG_PROJECT_ENV, project_env),
        connection=os.getenv(GRAYLOG_PROTOCOL, connection),
        use_tls=_parse_bool(os.getenv(GRAYLOG_TLS), default=use_tls),
    )


def mail_settings_from_env(*, api_key: str | None = None, default_sender: str | None = None) -> MailSettings:
    """Return SendGrid settings from ``SENDGRID_*`` variables, falling back to arguments."""

    return MailSettings(
        api_key=os.getenv(SENDGRID_API_KEY, api_key),
        default_sender=os.getenv(SENDGRID_SENDER, default_sender),
    )


def _parse_port(raw: str) -> int | str:
    stripped = raw.strip()
    return int(stripped) if stripped.isdigit() else raw


def _parse_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return default


def _search_upwards(start: Path) -> Path | None:
    directory = start.resolve()
    if directory.is_file():
        directory = directory.parent
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED, _DOTENV_ATTEMPTED
    with _DOTENV_LOCK:
        _DOTENV_LOADED = None
        _DOTENV_ATTEMPTED = False


__all__ = [
    "DOTENV_ENV_VAR",
    "GraylogSettings",
    "MailSettings",
    "enable_dotenv",
    "graylog_settings_from_env",
    "mail_settings_from_env",
    "should_use_dotenv",
]
