"""Worker pool that records queueing and execution statistics."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

from lp_probe.models.run import ThreadPoolStats


class _LatencyStats:
    def __init__(self) -> None:
        self.count = 0
        self.total_ns = 0
        self.max_ns = 0

    def record(self, value_ns: int) -> None:
        self.count += 1
        self.total_ns += value_ns
        if value_ns > self.max_ns:
            self.max_ns = value_ns

    @property
    def avg_ms(self) -> float:
        return (self.total_ns / self.count) / 1_000_000 if self.count else 0.0

    @property
    def max_ms(self) -> float:
        return self.max_ns / 1_000_000


class MonitoredThreadPool(ThreadPoolExecutor):
    """ThreadPoolExecutor tracking tasks, peak concurrency and latencies."""

    def __init__(self, max_workers: int, thread_name_prefix: str = "probe") -> None:
        super().__init__(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._stats_lock = threading.Lock()
        self._tasks = 0
        self._queued = 0
        self._active = 0
        self._max_queued = 0
        self._max_active = 0
        self._queue_latency = _LatencyStats()
        self._task_latency = _LatencyStats()

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        submitted_ns = time.perf_counter_ns()
        with self._stats_lock:
            self._tasks += 1
            self._queued += 1
            if self._queued > self._max_queued:
                self._max_queued = self._queued
        return super().submit(self._run_monitored, submitted_ns, fn, *args, **kwargs)

    def _run_monitored(self, submitted_ns: int, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        started_ns = time.perf_counter_ns()
        with self._stats_lock:
            self._queued -= 1
            self._active += 1
            if self._active > self._max_active:
                self._max_active = self._active
            self._queue_latency.record(started_ns - submitted_ns)
        try:
            return fn(*args, **kwargs)
        finally:
            finished_ns = time.perf_counter_ns()
            with self._stats_lock:
                self._active -= 1
                self._task_latency.record(finished_ns - started_ns)

    def stats(self) -> ThreadPoolStats:
        with self._stats_lock:
            return ThreadPoolStats(
                tasks=self._tasks,
                max_active_threads=self._max_active,
                max_queue_size=self._max_queued,
                avg_queue_latency_ms=self._queue_latency.avg_ms,
                max_queue_latency_ms=self._queue_latency.max_ms,
                avg_task_latency_ms=self._task_latency.avg_ms,
                max_task_latency_ms=self._task_latency.max_ms,
            )

    def stop(self) -> None:
        self.shutdown(wait=True)
