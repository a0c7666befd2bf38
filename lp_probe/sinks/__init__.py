"""Result sinks and their registry."""

from lp_probe.sinks.base import ResultSink
from lp_probe.sinks.builtin import DirectorySink, WebhookSink, builtin_sinks
from lp_probe.sinks.registry import ENTRYPOINT_GROUP, SinkPlugin, SinkRegistry


def create_sink_registry(discover: bool = True) -> SinkRegistry:
    """Registry with the built-in sinks plus installed entry points."""
    return SinkRegistry(builtin_sinks(), discover=discover)


__all__ = [
    "DirectorySink",
    "ENTRYPOINT_GROUP",
    "ResultSink",
    "SinkPlugin",
    "SinkRegistry",
    "WebhookSink",
    "builtin_sinks",
    "create_sink_registry",
]
