from __future__ import annotations

import pytest

from lib_graylog_sendgrid.domain.levels import Severity


@pytest.mark.parametrize(
    "name, expected",
    [
        ("trace", Severity.TRACE),
        ("DEBUG", Severity.DEBUG),
        (" Info ", Severity.INFO),
        ("warn", Severity.WARN),
        ("Error", Severity.ERROR),
    ],
)
def test_from_name_accepts_case_insensitive_matches(name: str, expected: Severity) -> None:
    assert Severity.from_name(name) is expected


def test_from_name_rejects_unknown_severity() -> None:
    with pytest.raises(ValueError, match="Unknown severity"):
        Severity.from_name("warning")


@pytest.mark.parametrize(
    "severity, syslog",
    [
        (Severity.TRACE, 7),
        (Severity.DEBUG, 7),
        (Severity.INFO, 6),
        (Severity.WARN, 4),
        (Severity.ERROR, 3),
    ],
)
def test_syslog_level_maps_to_gelf_priorities(severity: Severity, syslog: int) -> None:
    assert severity.syslog_level == syslog


def test_rank_follows_declared_order() -> None:
    ranks = [severity.rank for severity in Severity]
    assert ranks == sorted(ranks)
    assert Severity.TRACE.rank < Severity.ERROR.rank


def test_names_lists_the_five_accepted_values() -> None:
    assert Severity.names() == ("trace", "debug", "info", "warn", "error")
