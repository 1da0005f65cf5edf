"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from dragtree.core.drag.host import TreeHost
from dragtree.core.importer.json_reader import parse_tree_data
from dragtree.models.node import Tree
from tests.unit.trees import OUTLINE_DATA, PARENT_DATA


@pytest.fixture
def parent_tree() -> Tree:
    return parse_tree_data(PARENT_DATA)


@pytest.fixture
def outline_tree() -> Tree:
    return parse_tree_data(OUTLINE_DATA)


@pytest.fixture
def outline_host(outline_tree: Tree) -> TreeHost:
    return TreeHost(outline_tree)


@pytest.fixture
def outline_file(tmp_path: Path) -> Path:
    """Write the outline to a JSON file and return its path."""
    path = tmp_path / "outline.json"
    path.write_text(json.dumps(OUTLINE_DATA))
    return path
