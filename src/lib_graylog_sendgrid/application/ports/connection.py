"""Read-only view of the connection state consumed by the dispatcher."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .gelf import GelfTransportPort


@runtime_checkable
class ConnectionView(Protocol):
    """Configuration captured by ``init`` and read by every ``send``."""

    @property
    def project_name(self) -> str: ...

    @property
    def project_env(self) -> str: ...

    @property
    def version_core(self) -> str | None: ...

    @property
    def transport(self) -> GelfTransportPort: ...


__all__ = ["ConnectionView"]
