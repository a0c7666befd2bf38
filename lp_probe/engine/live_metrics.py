"""Live counters updated by engine workers and read by the progress reporter."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable


class _Counter:
    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def add(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        return self._value


class _Maximum:
    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def update(self, candidate: int) -> None:
        with self._lock:
            if candidate > self._value:
                self._value = candidate

    @property
    def value(self) -> int:
        return self._value


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of the live counters."""

    elapsed_seconds: float
    requests_sent: int
    responses_received: int
    failures: int
    in_flight: int
    resources_completed: int
    avg_response_ms: float
    max_response_ms: float
    request_rate: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class LiveMetrics:
    """Per-counter consistent metrics shared with the engine.

    Each counter is individually locked; a snapshot is not atomic across
    counters.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at: float | None = None
        self._requests_sent = _Counter()
        self._responses = _Counter()
        self._failures = _Counter()
        self._resources = _Counter()
        self._response_time_ns = _Counter()
        self._max_response_ns = _Maximum()

    def mark_started(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def on_request_sent(self) -> None:
        self.mark_started()
        self._requests_sent.add()

    def on_response(self, elapsed_ns: int, *, failed: bool = False) -> None:
        self._responses.add()
        self._response_time_ns.add(elapsed_ns)
        self._max_response_ns.update(elapsed_ns)
        if failed:
            self._failures.add()

    def on_failure(self) -> None:
        self._failures.add()

    def on_resource_completed(self) -> None:
        self._resources.add()

    def snapshot(self) -> ProgressSnapshot:
        elapsed = 0.0
        if self._started_at is not None:
            elapsed = max(0.0, self._clock() - self._started_at)
        sent = self._requests_sent.value
        received = self._responses.value
        total_ns = self._response_time_ns.value
        avg_ms = (total_ns / received) / 1_000_000 if received else 0.0
        return ProgressSnapshot(
            elapsed_seconds=round(elapsed, 3),
            requests_sent=sent,
            responses_received=received,
            failures=self._failures.value,
            in_flight=max(0, sent - received),
            resources_completed=self._resources.value,
            avg_response_ms=round(avg_ms, 3),
            max_response_ms=round(self._max_response_ns.value / 1_000_000, 3),
            request_rate=round(sent / elapsed, 3) if elapsed > 0 else 0.0,
        )
