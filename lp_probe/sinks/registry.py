"""Registry for result sink plugins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from lp_common.discovery.entrypoints import PendingEntryPoints
from lp_probe.sinks.base import ResultSink

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "load_probe.sinks"


@dataclass
class SinkPlugin:
    """Metadata and factory for a result sink."""

    name: str
    description: str
    factory: Callable[[], ResultSink]
    is_active: Callable[[Mapping[str, str]], bool] = lambda _: True


class SinkRegistry:
    """Registry for result sinks (built-in + entry points)."""

    def __init__(self, plugins: Optional[Iterable[Any]] = None, discover: bool = True) -> None:
        self._sinks: Dict[str, SinkPlugin] = {}
        if plugins:
            for plugin in plugins:
                self.register(plugin)
        self._entry_points = PendingEntryPoints(ENTRYPOINT_GROUP, discover=discover)

    def register(self, plugin: Any) -> None:
        """Register a sink plugin."""
        if isinstance(plugin, SinkPlugin):
            self._sinks[plugin.name] = plugin
            return
        if hasattr(plugin, "name") and hasattr(plugin, "factory"):
            self._sinks[plugin.name] = plugin
            return
        raise TypeError(f"Unknown sink plugin type: {type(plugin)}")

    def available(self, load_entrypoints: bool = False) -> Dict[str, SinkPlugin]:
        """Return registered sink plugins."""
        if load_entrypoints:
            self._load_pending_entrypoints()
        return dict(self._sinks)

    def get_actives(self, params: Mapping[str, str]) -> list[ResultSink]:
        """Instantiate the sinks that consider themselves active for ``params``."""
        self._load_pending_entrypoints()
        sinks: list[ResultSink] = []
        for plugin in self._sinks.values():
            try:
                if not plugin.is_active(params):
                    continue
                sink = plugin.factory()
            except Exception as exc:
                logger.error("Failed to create result sink %s: %s", plugin.name, exc)
                continue
            if not getattr(sink, "name", None) or sink.name == ResultSink.name:
                sink.name = plugin.name
            sinks.append(sink)
        return sinks

    def _load_pending_entrypoints(self) -> None:
        loaded = self._entry_points.drain(self.register)
        if loaded:
            logger.debug("Loaded sink entry points: %s", ", ".join(loaded))
