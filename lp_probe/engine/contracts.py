"""Contracts between the probe and the load-generation engine."""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from lp_probe.models.run import RunConfig


@dataclass
class Resource:
    """A node of the resource tree issued by the engine.

    Children are requested after their parent completes.
    """

    path: str = "/"
    method: str = "GET"
    children: list["Resource"] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    def descendant_count(self) -> int:
        """Count this resource and every resource below it."""
        return 1 + sum(child.descendant_count() for child in self.children)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Resource":
        children = data.get("children") or data.get("resources") or []
        return cls(
            path=str(data.get("path", "/")),
            method=str(data.get("method", "GET")).upper(),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            children=[cls.from_dict(child) for child in children],
        )


@runtime_checkable
class LoadEngine(Protocol):
    """Load-generation engine driven by the probe.

    ``run`` blocks until the run completes and returns aggregated metrics.
    """

    resource: Resource

    def build(self, config: RunConfig) -> Any:
        ...

    def run(self, executable: Any) -> Mapping[str, Any]:
        ...


@dataclass
class EngineContext:
    """Collaborators handed to an engine factory."""

    resource: Resource
    live_metrics: Any
    executor: Executor | None = None
    scheduler: Any | None = None
    http_client: Any | None = None
    options: dict[str, Any] = field(default_factory=dict)


EngineFactory = Callable[[EngineContext], LoadEngine]
