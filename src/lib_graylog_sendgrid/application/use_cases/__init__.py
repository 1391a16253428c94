"""Use cases turning validated calls into transport hand-offs."""

from __future__ import annotations
