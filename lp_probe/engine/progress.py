"""Periodic live progress reporting for a running probe."""

from __future__ import annotations

import logging
from typing import Callable

from lp_probe.engine.live_metrics import ProgressSnapshot
from lp_probe.engine.scheduler import ProbeScheduler, RepeatingTask
from lp_probe.models.run import ServerIdentity


logger = logging.getLogger(__name__)


class ProgressReporter:
    """Render live snapshots on a fixed cadence.

    Each report only reads counters; it never blocks the run.
    """

    def __init__(
        self,
        snapshot_provider: Callable[[], ProgressSnapshot],
        *,
        period: float = 2.0,
        server: ServerIdentity | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._snapshot_provider = snapshot_provider
        self._period = period
        self._server = server
        self._log = log or logger
        self._task: RepeatingTask | None = None
        self.last_snapshot: ProgressSnapshot | None = None

    @property
    def period(self) -> float:
        return self._period

    def set_server(self, server: ServerIdentity) -> None:
        self._server = server

    def start(self, scheduler: ProbeScheduler) -> RepeatingTask:
        """Register the reporting task; the scheduler owns its lifetime."""
        if self._task is None:
            self._task = scheduler.schedule_repeating(
                self.report, self._period, name="probe-progress"
            )
        return self._task

    def report(self) -> ProgressSnapshot:
        snapshot = self._snapshot_provider()
        self.last_snapshot = snapshot
        self._log.info("%s", self.render(snapshot))
        return snapshot

    def render(self, snapshot: ProgressSnapshot) -> str:
        target = ""
        if self._server is not None:
            target = f"{self._server.host}:{self._server.port} "
        return (
            f"{target}elapsed={snapshot.elapsed_seconds:.0f}s"
            f" requests={snapshot.requests_sent} responses={snapshot.responses_received}"
            f" in_flight={snapshot.in_flight} failures={snapshot.failures}"
            f" resources={snapshot.resources_completed}"
            f" rate={snapshot.request_rate:.1f}/s"
            f" latency avg/max={snapshot.avg_response_ms:.1f}/{snapshot.max_response_ms:.1f} ms"
        )
