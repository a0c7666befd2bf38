"""Unit tests for resource trees."""

from __future__ import annotations

from pathlib import Path

import pytest

from lp_common.errors import ConfigurationError
from lp_probe.engine.contracts import Resource
from lp_probe.engine.resources import load_resource_tree
from tests.helpers.probe_fakes import tree


pytestmark = [pytest.mark.unit, pytest.mark.unit_probe]


class TestDescendantCount:
    """Resource cardinality."""

    def test_single_resource(self) -> None:
        assert Resource().descendant_count() == 1

    @pytest.mark.parametrize("depth,fanout,expected", [(1, 3, 4), (2, 2, 7), (3, 3, 40)])
    def test_complete_trees(self, depth: int, fanout: int, expected: int) -> None:
        assert tree(depth, fanout).descendant_count() == expected


class TestLoadResourceTree:
    """YAML/JSON loading."""

    def test_loads_yaml_tree(self, tmp_path: Path) -> None:
        path = tmp_path / "resources.yml"
        path.write_text(
            "path: /index.html\n"
            "children:\n"
            "  - path: /style.css\n"
            "  - path: /app.js\n"
            "    children:\n"
            "      - path: /api/data\n"
            "        method: post\n"
        )

        root = load_resource_tree(path)

        assert root.path == "/index.html"
        assert root.descendant_count() == 4
        assert root.children[1].children[0].method == "POST"

    def test_top_level_list_gets_synthetic_root(self, tmp_path: Path) -> None:
        path = tmp_path / "resources.json"
        path.write_text('[{"path": "/a"}, {"path": "/b"}]')

        root = load_resource_tree(path)

        assert root.path == "/"
        assert root.descendant_count() == 3

    def test_missing_file_raises_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_resource_tree(tmp_path / "absent.yml")

    def test_malformed_file_raises_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ConfigurationError):
            load_resource_tree(path)

    def test_scalar_document_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "scalar.yml"
        path.write_text("42\n")
        with pytest.raises(ConfigurationError):
            load_resource_tree(path)
