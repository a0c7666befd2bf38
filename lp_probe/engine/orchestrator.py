"""
Probe orchestration.

This module sequences a probe run: it resolves the target identity, toggles
server-side statistics, obtains the run configuration, drives the load
engine, and persists the result. Teardown of the transport, scheduler and
worker pool runs on every exit path before control returns to the caller.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from lp_common.errors import (
    ConfigRetrievalTimeoutError,
    EngineError,
    LPError,
    SinkError,
    wrap_error,
)
from lp_common.logging import bind_run_context, clear_run_context
from lp_probe.engine.contracts import EngineContext, EngineFactory, LoadEngine, Resource
from lp_probe.engine.live_metrics import LiveMetrics
from lp_probe.engine.progress import ProgressReporter
from lp_probe.engine.resources import load_resource_tree
from lp_probe.engine.retry import retry_until
from lp_probe.engine.scheduler import ProbeScheduler
from lp_probe.engine.thread_pool import MonitoredThreadPool
from lp_probe.models.config import ProbeSettings
from lp_probe.models.run import RunConfig, RunResult, ServerIdentity, ThreadPoolStats
from lp_probe.services.config_fetcher import ConfigFetcher
from lp_probe.services.http_client import ProbeHttpClient
from lp_probe.services.result_persister import ResultPersister
from lp_probe.services.server_info import resolve_server_identity
from lp_probe.services.stats_controller import RemoteStatsController
from lp_probe.sinks import SinkRegistry, create_sink_registry

logger = logging.getLogger(__name__)

EXTERNAL_ID_PARAM = "jenkins.buildId"
COMMENT_PARAM = "loadresult.comment"


class ProbeState(str, Enum):
    """Lifecycle states of a probe run."""

    CREATED = "created"
    RESOLVING_IDENTITY = "resolving_identity"
    STATS_STARTING = "stats_starting"
    CONFIGURING_RUN = "configuring_run"
    RUNNING = "running"
    STATS_STOPPING = "stats_stopping"
    PERSISTING = "persisting"
    ABORTED = "aborted"
    TORN_DOWN = "torn_down"


@dataclass
class ProbeOutcome:
    """What a completed run produced."""

    result: RunResult
    server: ServerIdentity
    sink_errors: list[SinkError] = field(default_factory=list)
    run_seconds: float = 0.0


class ProbeOrchestrator:
    """Drive a single probe run around a blocking engine invocation."""

    def __init__(
        self,
        settings: ProbeSettings,
        engine: LoadEngine,
        *,
        http_client: ProbeHttpClient,
        scheduler: ProbeScheduler,
        executor: Any | None = None,
        live_metrics: LiveMetrics | None = None,
        sink_registry: SinkRegistry | None = None,
        config_fetcher: ConfigFetcher | None = None,
        stats_controller: RemoteStatsController | None = None,
        persister: ResultPersister | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        log: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.engine = engine
        self._log = log or logger
        self._http_client = http_client
        self._scheduler = scheduler
        self._executor = executor
        self._live_metrics = live_metrics or LiveMetrics()
        self._sink_registry = sink_registry if sink_registry is not None else create_sink_registry()
        endpoints = settings.endpoints
        self._config_fetcher = config_fetcher or ConfigFetcher(
            http_client,
            path=endpoints.load_config,
            timeout_seconds=settings.timings.request_timeout,
            log=self._log,
        )
        self._stats = stats_controller or RemoteStatsController(
            http_client,
            start_path=endpoints.stats_start,
            stop_path=endpoints.stats_stop,
            log=self._log,
        )
        self._persister = persister or ResultPersister(
            result_path=settings.result_path,
            params=settings.dynamic_params,
            log=self._log,
        )
        self._reporter = ProgressReporter(
            self._live_metrics.snapshot,
            period=settings.timings.progress_period,
            log=self._log,
        )
        self._clock = clock
        self._sleep = sleep
        self._state = ProbeState.CREATED
        self.history: list[ProbeState] = [ProbeState.CREATED]
        self._torn_down = False
        self.pool_stats: ThreadPoolStats | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ProbeSettings,
        engine_factory: EngineFactory,
        *,
        sink_registry: SinkRegistry | None = None,
        engine_options: Mapping[str, Any] | None = None,
        log: logging.Logger | None = None,
    ) -> "ProbeOrchestrator":
        """Build the run-scoped collaborators and the engine for ``settings``."""
        resource = (
            load_resource_tree(settings.resources_path)
            if settings.resources_path
            else Resource()
        )
        executor: MonitoredThreadPool | None = None
        if settings.shared_threads > 0:
            executor = MonitoredThreadPool(settings.shared_threads, thread_name_prefix="probe")
        scheduler = ProbeScheduler("probe-scheduler", log=log)
        http_client = ProbeHttpClient(
            settings.base_url, timeout_seconds=settings.timings.request_timeout
        )
        live_metrics = LiveMetrics()
        try:
            engine = engine_factory(
                EngineContext(
                    resource=resource,
                    live_metrics=live_metrics,
                    executor=executor,
                    scheduler=scheduler,
                    http_client=http_client,
                    options=dict(engine_options or {}),
                )
            )
        except Exception as exc:
            if executor is not None:
                executor.stop()
            if isinstance(exc, LPError):
                raise
            raise wrap_error(
                EngineError,
                "Cannot build load generator",
                context={"factory": getattr(engine_factory, "__name__", repr(engine_factory))},
                cause=exc,
            ) from exc
        return cls(
            settings,
            engine,
            http_client=http_client,
            scheduler=scheduler,
            executor=executor,
            live_metrics=live_metrics,
            sink_registry=sink_registry,
            log=log,
        )

    @property
    def state(self) -> ProbeState:
        return self._state

    @property
    def reporter(self) -> ProgressReporter:
        return self._reporter

    def _transition(self, state: ProbeState) -> None:
        self._log.debug("Probe state %s -> %s", self._state.value, state.value)
        self._state = state
        self.history.append(state)
        bind_run_context(probe_state=state.value)

    def run(self) -> ProbeOutcome:
        """Execute the whole probe sequence.

        Raises ``ConfigRetrievalTimeoutError`` when no configuration arrives in
        time and ``EngineError`` when the engine fails; teardown has completed
        by the time either propagates.
        """
        bind_run_context(
            target=self.settings.base_url,
            loader_number=self.settings.instance_number,
            transport=self.settings.transport,
        )
        try:
            self._http_client.start()
            self._scheduler.start()

            server = self._resolve_identity()

            self._transition(ProbeState.STATS_STARTING)
            self._stats.start()

            config = self._configure_run()
            self._reporter.set_server(server)
            self._reporter.start(self._scheduler)

            self._transition(ProbeState.RUNNING)
            metrics, run_seconds = self._run_engine(config)

            self._transition(ProbeState.STATS_STOPPING)
            self._stats.stop()

            self._transition(ProbeState.PERSISTING)
            result = self.build_result(server, config, metrics)
            sinks = self._sink_registry.get_actives(self.settings.dynamic_params)
            sink_errors = self._persister.persist(result, sinks)
            return ProbeOutcome(
                result=result,
                server=server,
                sink_errors=sink_errors,
                run_seconds=run_seconds,
            )
        finally:
            self._log.info("Finally block in probe")
            self.teardown()

    def _resolve_identity(self) -> ServerIdentity:
        self._transition(ProbeState.RESOLVING_IDENTITY)
        server = resolve_server_identity(
            self._http_client,
            scheme=self.settings.scheme,
            host=self.settings.host,
            port=self.settings.port,
            path=self.settings.endpoints.server_info,
            version_override=self.settings.server_version,
            log=self._log,
        )
        self._log.info("Run load test on server: %s", server.to_dict())
        return server

    def _configure_run(self) -> RunConfig:
        self._transition(ProbeState.CONFIGURING_RUN)
        if self.settings.skip_config_retrieval:
            self._log.info("Skipping run configuration retrieval")
            config = RunConfig()
        else:
            timings = self.settings.timings
            try:
                config = retry_until(
                    self._config_fetcher.fetch,
                    interval=timings.config_poll_interval,
                    deadline=timings.config_max_wait,
                    clock=self._clock,
                    sleep=self._sleep,
                    log=self._log,
                )
            except ConfigRetrievalTimeoutError as exc:
                self._transition(ProbeState.ABORTED)
                self._log.error(
                    "Stop probe: run configuration not available after %ss (%d attempts)",
                    exc.max_seconds,
                    exc.attempts,
                )
                raise

        config = config.finalize(
            instance_number=self.settings.instance_number,
            transport=self.settings.transport,
            resource_number=self.engine.resource.descendant_count(),
        )
        self._log.info("Run config: %s", config.to_json())
        return config

    def _run_engine(self, config: RunConfig) -> tuple[dict[str, Any], float]:
        self._log.info("Start probe load generator run")
        started = time.perf_counter()
        try:
            executable = self.engine.build(config)
            metrics = self.engine.run(executable)
        except LPError:
            raise
        except Exception as exc:
            raise wrap_error(
                EngineError,
                "Load generator run failed",
                context={"engine": type(self.engine).__name__},
                cause=exc,
            ) from exc
        elapsed = time.perf_counter() - started
        self._log.info("End probe load generator run %d seconds", int(elapsed))
        return dict(metrics or {}), elapsed

    def build_result(
        self,
        server: ServerIdentity,
        config: RunConfig,
        metrics: Mapping[str, Any],
    ) -> RunResult:
        """Assemble the final result; optional fields only when provided."""
        result = RunResult(
            uuid=str(uuid.uuid4()),
            transport=self.settings.transport,
            server_info=server,
            metrics=dict(metrics),
        )
        result.add_load_config(config)

        external_id = self.settings.param(EXTERNAL_ID_PARAM)
        self._log.info(
            "External id %s, dynamic params %s", external_id, self.settings.dynamic_params
        )
        if external_id:
            result.external_id = external_id
        comment = self.settings.param(COMMENT_PARAM)
        if comment:
            result.comment = comment
        return result

    def teardown(self) -> None:
        """Release run-scoped resources exactly once; never raises."""
        if self._torn_down:
            return
        self._torn_down = True

        if isinstance(self._executor, MonitoredThreadPool):
            try:
                self.pool_stats = self._executor.stats()
                self._log.info("%s", self.pool_stats.describe())
            except Exception as exc:
                self._log.warning("Cannot read thread pool stats: %s", exc)

        steps: list[tuple[str, Callable[[], None]]] = [
            ("http client", self._http_client.stop),
            ("scheduler", self._scheduler.stop),
        ]
        if self._executor is not None:
            steps.append(("thread pool", self._stop_executor))
        for label, stop in steps:
            try:
                stop()
            except Exception as exc:
                self._log.warning("Failed to stop %s: %s", label, exc)

        if self._state is not ProbeState.ABORTED:
            self._transition(ProbeState.TORN_DOWN)
        clear_run_context()

    def _stop_executor(self) -> None:
        stop = getattr(self._executor, "stop", None)
        if callable(stop):
            stop()
        else:
            self._executor.shutdown(wait=True)
