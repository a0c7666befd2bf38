"""Public API surface for lp_common."""

from lp_common.errors import (
    ConfigRetrievalTimeoutError,
    ConfigurationError,
    EngineError,
    LPError,
    ResultPersistenceError,
    SinkError,
    TransportError,
)
from lp_common.logging import bind_run_context, clear_run_context, configure_logging

__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "ConfigRetrievalTimeoutError",
    "ConfigurationError",
    "EngineError",
    "LPError",
    "ResultPersistenceError",
    "SinkError",
    "TransportError",
]
