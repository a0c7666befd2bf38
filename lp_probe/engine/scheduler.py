"""Repeating tasks driven by dedicated ticker threads."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Run ``action`` every ``period`` seconds until cancelled.

    Invocations happen on a single ticker thread, so they never overlap.
    An exception from ``action`` is logged and the ticker keeps going.
    """

    def __init__(
        self,
        action: Callable[[], None],
        period: float,
        *,
        name: str = "repeating-task",
        log: logging.Logger | None = None,
    ) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self.name = name
        self.period = period
        self._action = action
        self._log = log or logger
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.invocations = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> "RepeatingTask":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        return self

    def cancel(self, timeout: float | None = None) -> None:
        """Stop ticking and wait for an in-progress invocation to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.period * 2 if timeout is None else timeout)

    def _loop(self) -> None:
        while not self._stop_event.wait(self.period):
            self.invocations += 1
            try:
                self._action()
            except Exception as exc:
                self._log.warning("Repeating task %s failed: %s", self.name, exc)


class ProbeScheduler:
    """Owns the repeating tasks of a run; ``stop`` cancels all of them."""

    def __init__(self, name: str = "probe-scheduler", log: logging.Logger | None = None) -> None:
        self.name = name
        self._log = log or logger
        self._tasks: list[RepeatingTask] = []
        self._lock = threading.Lock()
        self._started = False
        self._stopped = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        self._started = True

    def schedule_repeating(self, action: Callable[[], None], period: float, name: str | None = None) -> RepeatingTask:
        with self._lock:
            if self._stopped:
                raise RuntimeError(f"Scheduler {self.name} is stopped")
            task = RepeatingTask(
                action,
                period,
                name=name or f"{self.name}-{len(self._tasks) + 1}",
                log=self._log,
            )
            self._tasks.append(task)
        return task.start()

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            tasks = list(self._tasks)
            self._tasks.clear()
        for task in tasks:
            task.cancel()
        self._log.debug("Scheduler %s stopped (%d tasks cancelled)", self.name, len(tasks))
