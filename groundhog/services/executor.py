"""Single-thread delayed executor with at most one pending task per key."""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _Task:
    due: float
    seq: int
    key: str = field(compare=False)
    fn: Callable[[], None] = field(compare=False)


class DelayedExecutor:
    """Runs one-shot callbacks on a dedicated worker thread after a delay.

    Tasks are keyed: scheduling a key that already has a pending task
    replaces it, so each key has at most one outstanding task. The worker
    thread is started on the first ``call_later``.

    ``shutdown`` discards every pending task. A task that is already running
    is allowed to finish, and anything it tries to schedule is rejected.
    """

    def __init__(
        self,
        name: str = "groundhog-refresh",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._name = name
        self._clock = clock
        self._cond = threading.Condition()
        self._heap: list[_Task] = []
        self._pending: dict[str, _Task] = {}
        self._seq = itertools.count()
        self._shutdown = False
        self._thread: threading.Thread | None = None

    def call_later(self, delay: float, key: str, fn: Callable[[], None]) -> bool:
        """Run *fn* after *delay* seconds (now if <= 0).

        Returns False if the executor has been shut down.
        """
        with self._cond:
            if self._shutdown:
                return False
            task = _Task(
                due=self._clock() + max(delay, 0.0),
                seq=next(self._seq),
                key=key,
                fn=fn,
            )
            self._pending[key] = task
            heapq.heappush(self._heap, task)
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name=self._name, daemon=True
                )
                self._thread.start()
            self._cond.notify()
            return True

    def cancel(self, key: str) -> bool:
        """Drop the pending task for *key*. Returns False if there was none."""
        with self._cond:
            return self._pending.pop(key, None) is not None

    def pending_count(self) -> int:
        with self._cond:
            return len(self._pending)

    @property
    def is_shutdown(self) -> bool:
        with self._cond:
            return self._shutdown

    def shutdown(self, wait: bool = False, timeout: float | None = None) -> None:
        """Stop the worker and discard pending tasks. Safe to call twice."""
        with self._cond:
            self._shutdown = True
            self._heap.clear()
            self._pending.clear()
            self._cond.notify_all()
            thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _next_task(self) -> _Task | None:
        """Block until a task is due. Returns None once shut down."""
        with self._cond:
            while True:
                if self._shutdown:
                    return None
                # Skip tasks that were replaced or cancelled
                while self._heap and not self._is_current(self._heap[0]):
                    heapq.heappop(self._heap)
                if not self._heap:
                    self._cond.wait()
                    continue
                wait = self._heap[0].due - self._clock()
                if wait <= 0:
                    task = heapq.heappop(self._heap)
                    del self._pending[task.key]
                    return task
                self._cond.wait(wait)

    def _is_current(self, task: _Task) -> bool:
        return self._pending.get(task.key) is task

    def _run(self) -> None:
        while True:
            task = self._next_task()
            if task is None:
                logger.debug("Executor %s stopped", self._name)
                return
            try:
                task.fn()
            except Exception:
                logger.exception("Scheduled task for %s failed", task.key)
