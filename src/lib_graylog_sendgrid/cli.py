"""Command-line adapter for sending Graylog records and SendGrid mail.

Purpose
-------
Give operators a quick way to verify a Graylog input or a SendGrid key from a
shell, using the same clients host applications call.

Contents
--------
* :func:`cli` - click group with the global ``--traceback`` / ``--use-dotenv``
  switches.
* ``info``, ``graylog-send``, ``graylog-preview``, ``mail-send`` commands.
* :func:`main` - entry point executed through ``lib_cli_exit_tools.run_cli``.

System Role
-----------
Presentation layer only: settings come from options or the environment (see
:mod:`lib_graylog_sendgrid.config`), validation failures become click usage
errors (exit code 2), and delivery failures become click exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import click
import lib_cli_exit_tools
from rich.console import Console
from rich.logging import RichHandler

from . import __init__conf__, config
from .adapters.gelf import GelfTransport, resolve_protocol
from .domain import MailDeliveryError, Severity, ValidationError
from .runtime import GraylogClient, MailClient, init, send, shutdown

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
PACKAGE_LOGGER = "lib_graylog_sendgrid"


def _print_info() -> None:
    __init__conf__.print_info(writer=lambda text: click.echo(text, nl=False))


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    package_logger.setLevel(logging.INFO)


def _parse_payload(_ctx: click.Context, _param: click.Parameter, values: Sequence[str]) -> dict[str, str]:
    payload: dict[str, str] = {}
    for item in values:
        key, separator, value = item.partition("=")
        if not separator or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}")
        payload[key] = value
    return payload


def _graylog_options(function: Any) -> Any:
    options = [
        click.option("--host", "hostname", default=None, help=f"Graylog host (env {config.GRAYLOG_HOST})."),
        click.option("--port", type=int, default=None, help=f"Graylog GELF input port (env {config.GRAYLOG_PORT})."),
        click.option("--project-name", default=None, help=f"Project name (env {config.GRAYLOG_PROJECT_NAME})."),
        click.option("--project-env", default=None, help=f"Project environment (env {config.GRAYLOG_PROJECT_ENV})."),
        click.option(
            "--connection",
            default="wan",
            show_default=True,
            help=f"wan/lan profile or tcp/udp protocol (env {config.GRAYLOG_PROTOCOL}).",
        ),
        click.option("--tls/--no-tls", default=False, help=f"Wrap TCP in TLS (env {config.GRAYLOG_TLS})."),
    ]
    for option in reversed(options):
        function = option(function)
    return function


def _record_options(function: Any) -> Any:
    options = [
        click.argument("message"),
        click.option(
            "--severity",
            type=click.Choice(Severity.names(), case_sensitive=False),
            default=Severity.INFO.value,
            show_default=True,
        ),
        click.option("--short", "short_message", default=None, help="Explicit short message (truncated to 50 chars)."),
        click.option("--payload", "payload", multiple=True, callback=_parse_payload, metavar="KEY=VALUE"),
    ]
    for option in reversed(options):
        function = option(function)
    return function


def _unsent_transport(*, host: str, port: int, connection: str, use_tls: bool) -> GelfTransport:
    return GelfTransport(host=host, port=port, protocol=resolve_protocol(connection), use_tls=use_tls)


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading settings (env {config.DOTENV_ENV_VAR}).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Print client diagnostics to stderr.")
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool | None, verbose: bool) -> None:
    """Root command storing the global flags."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if config.should_use_dotenv(explicit=use_dotenv):
        config.enable_dotenv()
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        _print_info()


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    _print_info()


@cli.command("graylog-send", context_settings=CLICK_CONTEXT_SETTINGS)
@_record_options
@_graylog_options
def cli_graylog_send(
    message: str,
    severity: str,
    short_message: str | None,
    payload: dict[str, str],
    hostname: str | None,
    port: int | None,
    project_name: str | None,
    project_env: str | None,
    connection: str,
    tls: bool,
) -> None:
    """Send MESSAGE to Graylog and wait for the queue to drain."""

    settings = config.graylog_settings_from_env(
        hostname=hostname,
        port=port,
        project_name=project_name,
        project_env=project_env,
        connection=connection,
        use_tls=tls,
    )
    try:
        init(**settings.init_kwargs())
        try:
            send(message, severity, short_message, payload)
        finally:
            shutdown()
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc
    click.echo(f"Queued {severity} record for {settings.hostname}:{settings.port}")


@cli.command("graylog-preview", context_settings=CLICK_CONTEXT_SETTINGS)
@_record_options
@_graylog_options
def cli_graylog_preview(
    message: str,
    severity: str,
    short_message: str | None,
    payload: dict[str, str],
    hostname: str | None,
    port: int | None,
    project_name: str | None,
    project_env: str | None,
    connection: str,
    tls: bool,
) -> None:
    """Print the GELF document MESSAGE would produce without sending it."""

    settings = config.graylog_settings_from_env(
        hostname=hostname,
        port=port,
        project_name=project_name,
        project_env=project_env,
        connection=connection,
        use_tls=tls,
    )
    client = GraylogClient(
        connection=settings.connection,
        use_tls=settings.use_tls,
        transport_factory=_unsent_transport,
    )
    try:
        client.init(settings.hostname, settings.port, settings.project_name, settings.project_env)
        record = client.build_record(message, severity, short_message, payload)
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc
    finally:
        client.close()
    Console().print_json(record.to_json())


@cli.command("mail-send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--to", "recipients", multiple=True, required=True, help="Recipient address; repeat for several.")
@click.option("--subject", required=True)
@click.option("--text", default=None, help="Plain-text body.")
@click.option("--html", default=None, help="HTML body.")
@click.option("--sender", default=None, help=f"Sender address (env {config.SENDGRID_SENDER}).")
@click.option("--api-key", default=None, help=f"SendGrid API key (env {config.SENDGRID_API_KEY}).")
def cli_mail_send(
    recipients: tuple[str, ...],
    subject: str,
    text: str | None,
    html: str | None,
    sender: str | None,
    api_key: str | None,
) -> None:
    """Send one mail through SendGrid and print the message id."""

    settings = config.mail_settings_from_env(api_key=api_key, default_sender=sender)
    client = MailClient()
    try:
        client.init(settings.api_key, settings.default_sender)
        message_id = client.send(list(recipients), subject, text, html)
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc
    except MailDeliveryError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        client.close()
    click.echo(f"Accepted by SendGrid (message id: {message_id or 'unknown'})")


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI through ``lib_cli_exit_tools`` and return the exit code.

    The traceback preferences changed by ``--traceback`` are restored
    afterwards unless ``restore_traceback`` is ``False``.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
