"""CLI behaviour coverage for the click adapter."""

from __future__ import annotations

import json
import re
import sys
from typing import Any, Callable

import lib_cli_exit_tools
import pytest
from click.testing import CliRunner

from lib_graylog_sendgrid import __init__conf__
from lib_graylog_sendgrid import cli as cli_mod
from lib_graylog_sendgrid import config as relay_config
from lib_graylog_sendgrid.runtime import GraylogClient, MailClient

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


def summary_info() -> str:
    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


def run_cli(args: list[str] | None = None, env: dict[str, str] | None = None) -> tuple[int, str, BaseException | None]:
    """Invoke the click group with ``CliRunner`` and capture output."""

    runner = CliRunner()
    result = runner.invoke(cli_mod.cli, args or [], prog_name=__init__conf__.shell_command, env=env)
    return result.exit_code, result.output, result.exception


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        relay_config.GRAYLOG_HOST,
        relay_config.GRAYLOG_PORT,
        relay_config.GRAYLOG_PROJECT_NAME,
        relay_config.GRAYLOG_PROJECT_ENV,
        relay_config.GRAYLOG_PROTOCOL,
        relay_config.GRAYLOG_TLS,
        relay_config.SENDGRID_API_KEY,
        relay_config.SENDGRID_SENDER,
        relay_config.DOTENV_ENV_VAR,
    ):
        monkeypatch.delenv(name, raising=False)


def test_cli_without_subcommand_prints_summary() -> None:
    exit_code, stdout, _ = run_cli()

    assert exit_code == 0
    assert stdout == summary_info()


def test_cli_info_command_matches_summary() -> None:
    exit_code, stdout, _ = run_cli(["info"])

    assert exit_code == 0
    assert stdout == summary_info()
    assert "lib_graylog_sendgrid" in stdout


def test_cli_version_option() -> None:
    exit_code, stdout, _ = run_cli(["--version"])

    assert exit_code == 0
    assert stdout.strip() == f"{__init__conf__.shell_command} version {__init__conf__.version}"


def test_cli_no_traceback_option(monkeypatch: pytest.MonkeyPatch) -> None:
    """`--no-traceback` should disable verbose tracebacks for subsequent commands."""

    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", True, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", True, raising=False)

    exit_code, _stdout, _exception = run_cli(["--no-traceback", "info"])

    assert exit_code == 0
    assert lib_cli_exit_tools.config.traceback is False
    assert lib_cli_exit_tools.config.traceback_force_color is False


def test_graylog_preview_prints_gelf_document() -> None:
    exit_code, stdout, exception = run_cli(
        [
            "graylog-preview",
            "m" * 60,
            "--severity",
            "warn",
            "--payload",
            "order=1234",
            "--host",
            "graylog.local",
            "--port",
            "12201",
            "--project-name",
            "checkout",
            "--project-env",
            "test",
        ]
    )

    assert exit_code == 0, exception
    document = json.loads(strip_ansi(stdout))
    assert document["short_message"] == "m" * 50 + "..."
    assert document["level"] == 4
    assert document["_severity"] == "warn"
    assert document["_project_name"] == "checkout"
    assert document["_order"] == "1234"


def test_graylog_preview_reads_settings_from_environment() -> None:
    env = {
        relay_config.GRAYLOG_HOST: "graylog.env",
        relay_config.GRAYLOG_PORT: "12201",
        relay_config.GRAYLOG_PROJECT_NAME: "env-project",
        relay_config.GRAYLOG_PROJECT_ENV: "staging",
    }

    exit_code, stdout, exception = run_cli(["graylog-preview", "hello"], env=env)

    assert exit_code == 0, exception
    assert json.loads(strip_ansi(stdout))["_project_env"] == "staging"


def test_graylog_preview_missing_settings_is_a_usage_error() -> None:
    exit_code, stdout, _ = run_cli(["graylog-preview", "hello", "--port", "12201"])

    assert exit_code == 2
    assert "hostname is required" in stdout


def test_invalid_payload_option_is_rejected() -> None:
    exit_code, stdout, _ = run_cli(["graylog-preview", "hello", "--payload", "novalue"])

    assert exit_code == 2
    assert "KEY=VALUE" in stdout


def test_unknown_severity_is_rejected_by_click() -> None:
    exit_code, _stdout, _ = run_cli(["graylog-preview", "hello", "--severity", "fatal"])

    assert exit_code == 2


def test_graylog_send_initialises_sends_and_shuts_down(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, Any]] = []

    monkeypatch.setattr(cli_mod, "init", lambda **settings: calls.append(("init", settings)))
    monkeypatch.setattr(cli_mod, "send", lambda *args: calls.append(("send", args)))
    monkeypatch.setattr(cli_mod, "shutdown", lambda: calls.append(("shutdown", None)))

    exit_code, stdout, exception = run_cli(
        [
            "graylog-send",
            "deploy finished",
            "--severity",
            "info",
            "--short",
            "deploy",
            "--payload",
            "build=42",
            "--host",
            "graylog.local",
            "--port",
            "12201",
            "--project-name",
            "checkout",
            "--project-env",
            "production",
            "--connection",
            "lan",
        ]
    )

    assert exit_code == 0, exception
    assert [name for name, _ in calls] == ["init", "send", "shutdown"]
    assert calls[0][1]["connection"] == "lan"
    assert calls[1][1] == ("deploy finished", "info", "deploy", {"build": "42"})
    assert "graylog.local:12201" in stdout


def test_mail_send_reports_message_id(monkeypatch: pytest.MonkeyPatch) -> None:
    sent: list[tuple[Any, ...]] = []

    def fake_init(self: MailClient, api_key: Any, default_sender: str | None = None) -> None:
        sent.append(("init", api_key, default_sender))

    def fake_send(self: MailClient, to: Any, subject: str, text: str | None = None, html: str | None = None, **_: Any) -> str:
        sent.append(("send", to, subject, text, html))
        return "msg-42"

    monkeypatch.setattr(MailClient, "init", fake_init)
    monkeypatch.setattr(MailClient, "send", fake_send)

    exit_code, stdout, exception = run_cli(
        ["mail-send", "--to", "ops@example.com", "--subject", "Report", "--text", "all green"],
        env={relay_config.SENDGRID_API_KEY: "SG.env", relay_config.SENDGRID_SENDER: "noreply@example.com"},
    )

    assert exit_code == 0, exception
    assert sent[0] == ("init", "SG.env", "noreply@example.com")
    assert sent[1] == ("send", ["ops@example.com"], "Report", "all green", None)
    assert "msg-42" in stdout


def test_mail_send_without_api_key_is_a_usage_error() -> None:
    exit_code, stdout, _ = run_cli(["mail-send", "--to", "ops@example.com", "--subject", "Report", "--text", "x"])

    assert exit_code == 2
    assert "api_key is required" in stdout


def test_main_restores_traceback_preferences(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", True, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", True, raising=False)

    recorded: dict[str, bool] = {}

    def fake_run_cli(command: Callable[..., int], argv: list[str] | None = None, *, prog_name: str | None = None, **_: object) -> int:
        runner = CliRunner()
        result = runner.invoke(command, ["info"] if argv is None else argv)
        if result.exception is not None:
            raise result.exception
        recorded["traceback"] = lib_cli_exit_tools.config.traceback
        recorded["traceback_force_color"] = lib_cli_exit_tools.config.traceback_force_color
        return result.exit_code

    monkeypatch.setattr(lib_cli_exit_tools, "run_cli", fake_run_cli)

    exit_code = cli_mod.main(["--no-traceback", "info"])

    assert exit_code == 0
    assert recorded == {"traceback": False, "traceback_force_color": False}
    assert lib_cli_exit_tools.config.traceback is True
    assert lib_cli_exit_tools.config.traceback_force_color is True


def test_main_consumes_sys_argv(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", False, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", False, raising=False)
    monkeypatch.setattr(sys, "argv", [__init__conf__.shell_command, "info"], raising=False)

    exit_code = cli_mod.main()
    captured = capsys.readouterr()

    assert exit_code == 0
    assert "Info for lib_graylog_sendgrid" in captured.out


def test_preview_client_never_opens_a_socket(monkeypatch: pytest.MonkeyPatch) -> None:
    import socket

    def forbidden(*_args: object, **_kwargs: object) -> None:
        raise AssertionError("preview must not connect")

    monkeypatch.setattr(socket, "create_connection", forbidden)
    closed: list[bool] = []
    original_close = GraylogClient.close

    def tracking_close(self: GraylogClient) -> None:
        closed.append(True)
        original_close(self)

    monkeypatch.setattr(GraylogClient, "close", tracking_close)

    exit_code, _stdout, exception = run_cli(
        ["graylog-preview", "hello", "--host", "h", "--port", "1", "--project-name", "p", "--project-env", "e"]
    )

    assert exit_code == 0, exception
    assert closed == [True]
