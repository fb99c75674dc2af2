"""
Deferred Task Queue.

Backend auth-change callbacks run while the Supabase client holds its
auth lock, so nothing may call the backend from inside them.  Callbacks
instead ``defer`` that work to this queue, which runs it on its own
worker thread after the callback has returned.

Tasks run one at a time in submission order.  A task that raises is
logged and the worker moves on to the next one.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, Optional, Protocol, runtime_checkable

from storefront.logger import StructuredLogger
from storefront.services.base_service import BaseService

Task = Callable[[], None]


@runtime_checkable
class TaskQueue(Protocol):
    """Anything that can run a zero-argument callable on a later turn."""

    def defer(self, task: Task) -> None: ...  # noqa: E704


class ThreadTaskQueue(BaseService):
    """FIFO task queue drained by a single daemon thread.

    Follows the start/stop lifecycle of the other background workers:
    :meth:`start` is idempotent and :meth:`stop` lets the worker finish
    everything queued before it.

    Parameters
    ----------
    logger:
        Structured JSON logger.
    name:
        Thread name, visible in logs and debuggers.
    """

    _STOP_JOIN_TIMEOUT_S: float = 5.0

    def __init__(self, logger: StructuredLogger, name: str = "TaskQueue") -> None:
        super().__init__(logger)
        self._name = name
        # None is the stop marker.
        self._queue: "queue.Queue[Optional[Task]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def defer(self, task: Task) -> None:
        """Schedule *task*.  Tasks submitted before :meth:`start` wait for it."""
        self._queue.put(task)

    def start(self) -> None:
        """Start the worker thread.  No-op when already running."""
        if self._thread is not None and self._thread.is_alive():
            self._logger.debug("%s already running.", self._name)
            return

        self._thread = threading.Thread(
            target=self._run_loop,
            name=self._name,
            daemon=True,
        )
        self._thread.start()
        self._logger.info("%s started.", self._name)

    def stop(self) -> None:
        """Run the tasks already queued, then stop the worker and join it.

        Tasks deferred after ``stop`` wait for the next :meth:`start`.
        Safe to call when not running.
        """
        if self._thread is None:
            return

        # Queued behind every pending task, so those drain first.
        self._queue.put(None)
        self._thread.join(timeout=self._STOP_JOIN_TIMEOUT_S)
        if self._thread.is_alive():
            self._logger.warning(
                "%s did not stop within %.1f s.", self._name, self._STOP_JOIN_TIMEOUT_S,
            )
        self._thread = None
        self._logger.info("%s stopped.", self._name)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run_loop(self) -> None:
        while True:
            task = self._queue.get()
            try:
                if task is None:
                    return
                task()
            except Exception as exc:
                self._logger.error(
                    "Deferred task failed: %s", exc, exc_info=True,
                )
            finally:
                self._queue.task_done()
