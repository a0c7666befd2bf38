"""Resolve load engine factories by entry point name or import path."""

from __future__ import annotations

import logging
from typing import Any, Dict

from lp_common.discovery.entrypoints import discover_entrypoints, import_object
from lp_common.errors import ConfigurationError
from lp_probe.engine.contracts import EngineFactory

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "load_probe.engines"


def available_engines() -> Dict[str, Any]:
    """Entry points registered under ``load_probe.engines`` (not yet loaded)."""
    return discover_entrypoints(ENTRYPOINT_GROUP)


def resolve_engine_factory(name: str) -> EngineFactory:
    """Return the factory for ``name``.

    ``name`` is either an entry point name or a ``module:attribute`` path.
    """
    if not name:
        raise ConfigurationError("No load engine configured; pass --engine")
    try:
        if ":" in name:
            factory = import_object(name)
        else:
            entry_point = available_engines().get(name)
            if entry_point is None:
                raise ConfigurationError(
                    f"Unknown load engine {name!r}",
                    context={"available": sorted(available_engines())},
                )
            factory = entry_point.load()
    except ConfigurationError:
        raise
    except (ImportError, AttributeError, ValueError) as exc:
        raise ConfigurationError(
            f"Cannot load engine {name!r}", context={"engine": name}, cause=exc
        ) from exc
    if not callable(factory):
        raise ConfigurationError(f"Engine {name!r} is not callable", context={"engine": name})
    logger.debug("Resolved load engine %s -> %r", name, factory)
    return factory
