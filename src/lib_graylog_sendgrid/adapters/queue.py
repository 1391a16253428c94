"""Thread-based queue adapter behind fire-and-forget GELF emission.

Purpose
-------
Decouple ``send`` callers from socket I/O so the call returns as soon as the
record is queued.

Contents
--------
* :class:`QueueAdapter` - background worker implementation of :class:`QueuePort`.

System Role
-----------
Executes transport emission on a dedicated daemon thread; producers never wait
for the network. Drops and worker failures are routed to callbacks instead of
propagating to producers.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import TypeVar

from lib_graylog_sendgrid.application.ports.queue import QueuePort

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class QueueAdapter(QueuePort[T]):
    """Process queued items on a background thread.

    Examples
    --------
    >>> processed = []
    >>> adapter = QueueAdapter(worker=processed.append)
    >>> adapter.start()
    >>> adapter.put("record")
    True
    >>> adapter.stop(drain=True)
    >>> processed
    ['record']
    """

    def __init__(
        self,
        *,
        worker: Callable[[T], None],
        maxsize: int = 2048,
        drop_policy: str = "drop",
        on_drop: Callable[[T], None] | None = None,
        on_worker_error: Callable[[T, Exception], None] | None = None,
        timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
    ) -> None:
        """Create the queue.

        Parameters
        ----------
        worker:
            Callable invoked for each item on the worker thread.
        maxsize:
            Maximum number of queued items before the drop policy applies.
        drop_policy:
            ``"drop"`` rejects new items immediately when full; ``"block"``
            waits up to ``timeout`` seconds first.
        on_drop:
            Invoked with every rejected item.
        on_worker_error:
            Invoked when ``worker`` raises; the thread keeps running.
        timeout:
            Producer wait used by the blocking policy. ``None`` waits forever.
        stop_timeout:
            Default drain deadline for :meth:`stop`. ``None`` waits forever.
        """
        policy = drop_policy.lower()
        if policy not in {"block", "drop"}:
            raise ValueError("drop_policy must be 'block' or 'drop'")
        self._worker = worker
        self._queue: queue.Queue[object] = queue.Queue(maxsize=maxsize)
        self._thread: threading.Thread | None = None
        self._drop_policy = policy
        self._on_drop = on_drop
        self._on_worker_error = on_worker_error
        self._timeout = timeout
        self._stop_timeout = stop_timeout
        self._discard = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread if it is not already running."""
        if self.running:
            return
        self._discard.clear()
        self._thread = threading.Thread(target=self._run, name="gelf-queue", daemon=True)
        self._thread.start()

    def put(self, item: T) -> bool:
        """Enqueue ``item``; return ``False`` when the drop policy rejected it."""
        try:
            if self._drop_policy == "drop":
                self._queue.put(item, block=False)
            else:
                self._queue.put(item, timeout=self._timeout)
        except queue.Full:
            self._handle_drop(item)
            return False
        return True

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the worker, processing queued items first when ``drain`` is set.

        Raises
        ------
        RuntimeError
            When the worker is still alive after the deadline.
        """
        thread = self._thread
        if thread is None:
            return
        effective_timeout = timeout if timeout is not None else self._stop_timeout
        deadline = time.monotonic() + effective_timeout if effective_timeout is not None else None

        if not drain:
            self._discard.set()
        self._put_stop_signal(deadline)
        thread.join(None if deadline is None else max(0.0, deadline - time.monotonic()))

        if thread.is_alive():
            self._discard.set()
            LOGGER.error("Queue worker did not stop within %s seconds", effective_timeout)
            raise RuntimeError("Queue worker failed to stop within the allotted timeout")
        self._thread = None
        self._drop_remaining()

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until queued items are processed or ``timeout`` elapses."""
        deadline = time.monotonic() + timeout if timeout is not None else None
        while self._queue.unfinished_tasks:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(0.005)
        return True

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if self._discard.is_set():
                    self._handle_drop(item)  # type: ignore[arg-type]
                    continue
                try:
                    self._worker(item)  # type: ignore[arg-type]
                except Exception as exc:  # noqa: BLE001
                    self._report_worker_exception(item, exc)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _put_stop_signal(self, deadline: float | None) -> None:
        while True:
            try:
                if deadline is None:
                    self._queue.put(_STOP)
                else:
                    self._queue.put(_STOP, timeout=max(0.0, deadline - time.monotonic()))
                return
            except queue.Full:
                # make room by discarding the oldest pending item
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                self._queue.task_done()
                if dropped is not _STOP:
                    self._handle_drop(dropped)  # type: ignore[arg-type]

    def _drop_remaining(self) -> None:
        while True:
            try:
                leftover = self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()
            if leftover is not _STOP:
                self._handle_drop(leftover)  # type: ignore[arg-type]

    def _handle_drop(self, item: T) -> None:
        if self._on_drop is None:
            return
        try:
            self._on_drop(item)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue drop handler raised an exception; continuing", exc_info=exc)

    def _report_worker_exception(self, item: T, exc: Exception) -> None:
        if self._on_worker_error is None:
            LOGGER.error("Queue worker raised an exception; continuing", exc_info=exc)
            return
        try:
            self._on_worker_error(item, exc)
        except Exception as callback_exc:  # noqa: BLE001
            LOGGER.error("Queue error handler raised an exception; continuing", exc_info=callback_exc)


__all__ = ["QueueAdapter"]
