"""Load resource trees from YAML or JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from lp_common.errors import ConfigurationError
from lp_probe.engine.contracts import Resource


def load_resource_tree(path: Path) -> Resource:
    """Parse a resource tree file.

    A top-level list is wrapped in a synthetic root ``/`` resource.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(
            "Cannot read resource tree", context={"path": path}, cause=exc
        ) from exc
    try:
        if path.suffix.lower() == ".json":
            data: Any = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            "Malformed resource tree", context={"path": path}, cause=exc
        ) from exc

    if isinstance(data, list):
        data = {"path": "/", "children": data}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Resource tree must be a mapping or a list", context={"path": path}
        )
    return Resource.from_dict(data)
