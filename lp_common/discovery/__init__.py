"""Plugin discovery helpers."""

from .entrypoints import PendingEntryPoints, discover_entrypoints, import_object

__all__ = [
    "PendingEntryPoints",
    "discover_entrypoints",
    "import_object",
]
