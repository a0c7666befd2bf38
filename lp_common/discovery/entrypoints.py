"""Entry-point discovery for probe plugins (result sinks and load engines)."""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def discover_entrypoints(group: str) -> dict[str, importlib.metadata.EntryPoint]:
    """Entry points registered under ``group``, keyed by name.

    Nothing is imported. When two distributions register the same name the
    first one wins.
    """
    try:
        selected = importlib.metadata.entry_points().select(group=group)
    except Exception as exc:
        logger.debug("Cannot read entry points of %s: %s", group, exc)
        return {}
    found: dict[str, importlib.metadata.EntryPoint] = {}
    for entry_point in selected:
        found.setdefault(entry_point.name, entry_point)
    return found


class PendingEntryPoints:
    """Entry points of one group, imported the first time a caller needs them."""

    def __init__(self, group: str, *, discover: bool = True) -> None:
        self.group = group
        self._pending = discover_entrypoints(group) if discover else {}

    def drain(self, register: Callable[[Any], None]) -> list[str]:
        """Import every pending entry point and pass the object to ``register``.

        A plugin that fails to import or register is logged and dropped; the
        others still load. Returns the names that were registered.
        """
        registered: list[str] = []
        for name in list(self._pending):
            entry_point = self._pending.pop(name)
            try:
                register(entry_point.load())
            except ImportError as exc:
                logger.debug("Skipping %s plugin %s, missing dependency: %s", self.group, name, exc)
                continue
            except Exception as exc:
                logger.warning("Failed to load %s plugin %s: %s", self.group, name, exc)
                continue
            registered.append(name)
        return registered


def import_object(path: str) -> Any:
    """Import ``package.module:attr`` and return the attribute."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Expected 'module:attribute', got: {path!r}")
    target: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)
    return target
