"""Port describing the background queue behind fire-and-forget emission."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class QueuePort(Protocol[T]):
    """Bridge between ``send`` callers and the transport worker thread."""

    def start(self) -> None:
        """Start the queue worker."""

    def stop(self, *, drain: bool = True) -> None:
        """Stop the queue worker, optionally draining queued items."""

    def put(self, item: T) -> bool:
        """Enqueue ``item`` for asynchronous processing."""


__all__ = ["QueuePort"]
