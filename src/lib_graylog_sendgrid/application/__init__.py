"""Application layer: ports and the use cases orchestrating the clients."""

from __future__ import annotations
