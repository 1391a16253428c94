from __future__ import annotations

import pytest

from lib_graylog_sendgrid.domain.truncate import DEFAULT_MAX_LENGTH, ELLIPSIS, truncate


@pytest.mark.parametrize("text", ["", "short", "x" * DEFAULT_MAX_LENGTH])
def test_text_within_limit_is_returned_unchanged(text: str) -> None:
    assert truncate(text) == text


def test_text_over_limit_is_cut_and_suffixed() -> None:
    result = truncate("y" * (DEFAULT_MAX_LENGTH + 1))

    assert result == "y" * DEFAULT_MAX_LENGTH + ELLIPSIS
    assert len(result) == DEFAULT_MAX_LENGTH + len(ELLIPSIS)


def test_custom_length_is_honoured() -> None:
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"


def test_truncated_output_starts_with_the_input_prefix() -> None:
    text = "The quick brown fox jumps over the lazy dog and keeps running far away"

    result = truncate(text)

    assert result.startswith(text[:DEFAULT_MAX_LENGTH])
    assert result.endswith(ELLIPSIS)


@pytest.mark.parametrize("text, length", [("abcdefghij", 4), ("abcd...", 4), ("y" * 80, DEFAULT_MAX_LENGTH)])
def test_truncating_twice_equals_truncating_once(text: str, length: int) -> None:
    once = truncate(text, length)

    assert truncate(once, length) == once


def test_already_truncated_text_keeps_its_suffix() -> None:
    assert truncate("abcdefghij", 4) == "abcd..."
    assert truncate("abcd...", 4) == "abcd..."
