"""Stable probe API surface."""

from lp_probe.engine.contracts import EngineContext, EngineFactory, LoadEngine, Resource
from lp_probe.engine.live_metrics import LiveMetrics, ProgressSnapshot
from lp_probe.engine.orchestrator import ProbeOrchestrator, ProbeOutcome, ProbeState
from lp_probe.engine.retry import retry_until
from lp_probe.engine.scheduler import ProbeScheduler, RepeatingTask
from lp_probe.models.config import ProbeEndpoints, ProbeSettings, ProbeTimings
from lp_probe.models.run import RunConfig, RunResult, ServerIdentity, ThreadPoolStats
from lp_probe.sinks import ResultSink, SinkPlugin, SinkRegistry

__all__ = [
    "EngineContext",
    "EngineFactory",
    "LiveMetrics",
    "LoadEngine",
    "ProbeEndpoints",
    "ProbeOrchestrator",
    "ProbeOutcome",
    "ProbeScheduler",
    "ProbeSettings",
    "ProbeState",
    "ProbeTimings",
    "ProgressSnapshot",
    "RepeatingTask",
    "Resource",
    "ResultSink",
    "RunConfig",
    "RunResult",
    "ServerIdentity",
    "SinkPlugin",
    "SinkRegistry",
    "ThreadPoolStats",
    "retry_until",
]
