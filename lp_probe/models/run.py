"""Run configuration, server identity and result models.

Wire names are camelCase so payloads stay compatible with the coordinator
and with existing result stores; Python attributes are snake_case.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model tolerating unknown fields and camelCase aliases."""

    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ServerIdentity(WireModel):
    """Identity of the server under test, resolved once per run."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: int
    version: Optional[str] = Field(default=None, alias="jettyVersion")
    available_processors: Optional[int] = None
    total_memory: Optional[int] = None
    git_hash: Optional[str] = None
    java_version: Optional[str] = None

    def with_version(self, version: str | None) -> "ServerIdentity":
        """Return a copy whose version falls back to ``version`` when unset."""
        if self.version is not None or version is None:
            return self
        return self.model_copy(update={"version": version})


class RunConfig(WireModel):
    """Configuration of a load run.

    Only the fields the probe touches are declared; everything else the
    coordinator sends is preserved as extra data.
    """

    instance_number: Optional[int] = None
    transport: Optional[str] = None
    resource_number: Optional[int] = None

    def finalize(self, *, instance_number: int, transport: str, resource_number: int) -> "RunConfig":
        """Return the locally completed configuration used for the run."""
        return self.model_copy(
            update={
                "instance_number": instance_number,
                "transport": transport,
                "resource_number": resource_number,
            }
        )


class RunResult(WireModel):
    """Measurements and metadata of a completed run."""

    uuid: str
    external_id: Optional[str] = None
    comment: Optional[str] = None
    transport: Optional[str] = None
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    server_info: Optional[ServerIdentity] = None
    load_configs: List[RunConfig] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)

    def add_load_config(self, config: RunConfig) -> None:
        self.load_configs.append(config)


class ThreadPoolStats(BaseModel):
    """Diagnostic snapshot of a monitored worker pool."""

    model_config = ConfigDict(frozen=True)

    tasks: int = 0
    max_active_threads: int = 0
    max_queue_size: int = 0
    avg_queue_latency_ms: float = 0.0
    max_queue_latency_ms: float = 0.0
    avg_task_latency_ms: float = 0.0
    max_task_latency_ms: float = 0.0

    def describe(self) -> str:
        return (
            f"thread pool - tasks = {self.tasks} | concurrent threads max = {self.max_active_threads}"
            f" | queue size max = {self.max_queue_size}"
            f" | queue latency avg/max = {self.avg_queue_latency_ms:.0f}/{self.max_queue_latency_ms:.0f} ms"
            f" | task time avg/max = {self.avg_task_latency_ms:.0f}/{self.max_task_latency_ms:.0f} ms"
        )
