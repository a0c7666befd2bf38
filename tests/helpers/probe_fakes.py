"""Test doubles for probe collaborators."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Callable, Iterable, Mapping

from lp_common.errors import TransportError
from lp_probe.engine.contracts import Resource
from lp_probe.models.run import RunConfig, RunResult
from lp_probe.services.http_client import HttpResponse


Reply = HttpResponse | Exception | Callable[[], HttpResponse]


class FakeHttpClient:
    """Route GET/POST calls by path to canned replies.

    A path mapped to a list replays the replies in order and then repeats the
    last one.
    """

    def __init__(self, routes: Mapping[str, Reply | list[Reply]] | None = None) -> None:
        self._routes: dict[str, deque[Reply]] = {}
        for path, reply in (routes or {}).items():
            self.route(path, reply)
        self.calls: list[tuple[str, str]] = []
        self.timeouts: dict[str, list[float | None]] = defaultdict(list)
        self.start_calls = 0
        self.stop_calls = 0

    def route(self, path: str, reply: Reply | list[Reply]) -> None:
        replies = reply if isinstance(reply, list) else [reply]
        self._routes[path] = deque(replies)

    @property
    def running(self) -> bool:
        return self.start_calls > self.stop_calls

    def start(self) -> None:
        self.start_calls += 1

    def stop(self) -> None:
        self.stop_calls += 1

    def paths(self) -> list[str]:
        return [path for _, path in self.calls]

    def get(self, path: str, *, timeout: float | None = None) -> HttpResponse:
        return self.request("GET", path, timeout=timeout)

    def request(self, method: str, path: str, *, payload: Any = None, timeout: float | None = None) -> HttpResponse:
        self.calls.append((method, path))
        self.timeouts[path].append(timeout)
        replies = self._routes.get(path)
        if not replies:
            return HttpResponse(404, "not found")
        reply = replies.popleft() if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply()
        return reply


def refused(path: str = "/") -> TransportError:
    return TransportError(f"GET {path} failed: connection refused")


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeEngine:
    """Engine returning canned metrics; records the configuration it ran."""

    def __init__(
        self,
        resource: Resource | None = None,
        metrics: Mapping[str, Any] | None = None,
        error: Exception | None = None,
        on_run: Callable[[], None] | None = None,
    ) -> None:
        self.resource = resource or Resource()
        self._metrics = dict(metrics or {"totalRequests": 1000})
        self._error = error
        self._on_run = on_run
        self.built_with: RunConfig | None = None
        self.run_calls = 0

    def build(self, config: RunConfig) -> dict[str, Any]:
        self.built_with = config
        return {"config": config}

    def run(self, executable: Any) -> dict[str, Any]:
        self.run_calls += 1
        if self._on_run is not None:
            self._on_run()
        if self._error is not None:
            raise self._error
        return dict(self._metrics)


class RecordingSink:
    """Sink recording its lifecycle calls into a shared journal."""

    def __init__(self, name: str, journal: list[tuple[str, str]], fail_on: str | None = None, error: Exception | None = None) -> None:
        self.name = name
        self._journal = journal
        self._fail_on = fail_on
        self._error = error or RuntimeError(f"{name} broke")
        self.saved: list[RunResult] = []

    def _record(self, stage: str) -> None:
        self._journal.append((self.name, stage))
        if stage == self._fail_on:
            raise self._error

    def initialize(self, params: Mapping[str, str]) -> None:
        self._record("initialize")

    def save(self, result: RunResult) -> None:
        self._record("save")
        self.saved.append(result)

    def close(self) -> None:
        self._record("close")


class StaticSinkRegistry:
    """Registry stand-in returning a fixed sink list."""

    def __init__(self, sinks: Iterable[Any] = ()) -> None:
        self.sinks = list(sinks)
        self.requested_with: list[Mapping[str, str]] = []

    def get_actives(self, params: Mapping[str, str]) -> list[Any]:
        self.requested_with.append(dict(params))
        return list(self.sinks)


def tree(depth: int, fanout: int) -> Resource:
    """Build a complete resource tree."""
    if depth <= 0:
        return Resource(path="/leaf")
    return Resource(path=f"/d{depth}", children=[tree(depth - 1, fanout) for _ in range(fanout)])
