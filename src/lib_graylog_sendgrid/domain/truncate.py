"""String shortening used for the GELF ``short_message`` field."""

from __future__ import annotations

DEFAULT_MAX_LENGTH = 50
ELLIPSIS = "..."


def truncate(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Return ``text`` cut to ``max_length`` characters plus an ellipsis.

    Examples
    --------
    >>> truncate("short")
    'short'
    >>> truncate("abcdefghij", 4)
    'abcd...'
    >>> truncate(truncate("abcdefghij", 4), 4)
    'abcd...'
    """

    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}{ELLIPSIS}"


__all__ = ["DEFAULT_MAX_LENGTH", "ELLIPSIS", "truncate"]
