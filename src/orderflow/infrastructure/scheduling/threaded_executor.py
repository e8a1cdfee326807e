"""Deferred executor backed by one background thread.

Tasks sit in a heap ordered by due time (monotonic clock).  A single daemon
worker sleeps on a condition until the earliest task is due, runs it, and
goes back to sleep, so ``schedule`` never blocks the caller and tasks never
run concurrently with each other.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable

from orderflow.application.scheduling import DeferredExecutor, ScheduledTask

logger = logging.getLogger(__name__)

_WAITING = "waiting"
_RUNNING = "running"
_FINISHED = "finished"
_CANCELLED = "cancelled"


class _Task(ScheduledTask):

    def __init__(self, fn: Callable[[], object]) -> None:
        self._fn = fn
        self._state = _WAITING
        self._lock = threading.Lock()

    def cancel(self) -> bool:
        with self._lock:
            if self._state != _WAITING:
                return False
            self._state = _CANCELLED
            return True

    @property
    def done(self) -> bool:
        with self._lock:
            return self._state in (_FINISHED, _CANCELLED)

    def _claim(self) -> bool:
        with self._lock:
            if self._state != _WAITING:
                return False
            self._state = _RUNNING
            return True

    def _run(self) -> None:
        try:
            self._fn()
        except Exception:
            logger.exception("Deferred task %r failed", self._fn)
        finally:
            with self._lock:
                self._state = _FINISHED


class ThreadedDeferredExecutor(DeferredExecutor):
    """Runs tasks on one daemon thread once their delay has elapsed.

    Due times are measured with ``time.monotonic``, the same clock
    ``Condition.wait`` times out against, so wall-clock changes neither
    fire tasks early nor hold them back.
    """

    def __init__(self, name: str = "orderflow-deferred") -> None:
        self._name = name
        self._heap: list[tuple[float, int, _Task]] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._stopped = False
        self._thread: threading.Thread | None = None

    # --- DeferredExecutor interface -------------------------------------------

    def schedule(self, delay_seconds: float, fn: Callable[[], object]) -> ScheduledTask:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")

        task = _Task(fn)
        with self._cond:
            if self._stopped:
                raise RuntimeError("Cannot schedule after shutdown")
            due = time.monotonic() + delay_seconds
            heapq.heappush(self._heap, (due, next(self._seq), task))
            self._ensure_worker()
            self._cond.notify()
        return task

    def shutdown(self, wait: bool = True) -> None:
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            pending = [task for _, _, task in self._heap]
            self._heap.clear()
            self._cond.notify_all()
            worker = self._thread

        cancelled = sum(1 for task in pending if task.cancel())
        logger.debug("%s shut down, %d task(s) cancelled", self._name, cancelled)

        if wait and worker is not None and worker is not threading.current_thread():
            worker.join()

    @property
    def pending_count(self) -> int:
        with self._cond:
            return sum(1 for _, _, task in self._heap if not task.done)

    def __enter__(self) -> ThreadedDeferredExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # --- Worker ---------------------------------------------------------------

    def _ensure_worker(self) -> None:
        # caller holds self._cond
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._worker_loop, name=self._name, daemon=True
            )
            self._thread.start()
            logger.debug("Started worker thread %s", self._name)

    def _next_due_task(self) -> _Task | None:
        """Block until a task is due; None means shut down."""
        with self._cond:
            while True:
                if self._stopped:
                    return None
                if not self._heap:
                    self._cond.wait()
                    continue
                due, _, task = self._heap[0]
                remaining = due - time.monotonic()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                heapq.heappop(self._heap)
                return task

    def _worker_loop(self) -> None:
        while True:
            task = self._next_due_task()
            if task is None:
                return
            if task._claim():
                task._run()
