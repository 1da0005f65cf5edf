"""Convert between nested JSON records and Tree snapshots."""

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dragtree.models.node import Node, Tree

_EXHAUSTED = object()


@dataclass
class _OpenRecord:
    """A record whose children are still being parsed."""

    identifier: str
    label: str
    expanded: bool
    pending: Iterator[Any]
    built: list[Node] = field(default_factory=list)

    def close(self) -> Node:
        return Node(
            identifier=self.identifier,
            label=self.label,
            children=tuple(self.built),
            expanded=self.expanded,
        )


def _open_record(raw: Any, seen: set[str]) -> _OpenRecord:
    """Validate one record and start parsing its children."""
    if not isinstance(raw, dict):
        msg = f"Expected a record, got {raw!r}"
        raise ValueError(msg)
    if "id" not in raw:
        msg = f"Record without an id: {raw!r}"
        raise ValueError(msg)

    identifier = str(raw["id"])
    if identifier in seen:
        msg = f"Duplicate node id: {identifier!r}"
        raise ValueError(msg)
    seen.add(identifier)

    children = raw.get("children") or []
    if not isinstance(children, list):
        msg = f"Children of {identifier!r} must be a list"
        raise ValueError(msg)

    expanded = raw.get("expanded", True)
    if not isinstance(expanded, bool):
        msg = f"Expanded flag of {identifier!r} must be true or false, got {expanded!r}"
        raise ValueError(msg)

    return _OpenRecord(
        identifier=identifier,
        label=str(raw.get("title", raw.get("label", ""))),
        expanded=expanded,
        pending=iter(children),
    )


def parse_tree_data(data: list[dict[str, Any]]) -> Tree:
    """Parse a list of nested records into a Tree.

    Each record needs an ``id``; ``title`` (or ``label``) defaults to an empty
    string, ``children`` to no children and ``expanded`` to True. Records are
    parsed with an explicit stack, so nesting depth is unbounded.

    Args:
        data: Root-level records, e.g. as loaded from a JSON file.

    Returns:
        The parsed tree.

    Raises:
        ValueError: If the data is not a list of records, identifiers are
            missing or repeated, or a field has the wrong type.
    """
    if not isinstance(data, list):
        msg = f"Expected a list of root records, got {type(data).__name__}"
        raise ValueError(msg)

    seen: set[str] = set()
    roots: list[Node] = []
    stack: list[_OpenRecord] = []
    pending_roots = iter(data)

    while True:
        pending = stack[-1].pending if stack else pending_roots
        raw = next(pending, _EXHAUSTED)
        if raw is not _EXHAUSTED:
            stack.append(_open_record(raw, seen))
            continue
        if not stack:
            break
        node = stack.pop().close()
        (stack[-1].built if stack else roots).append(node)

    return tuple(roots)


def _record(node: Node) -> dict[str, Any]:
    record: dict[str, Any] = {"id": node.identifier, "title": node.label}
    if not node.expanded:
        record["expanded"] = False
    return record


def node_to_data(node: Node) -> dict[str, Any]:
    """Serialize one node and its subtree to a plain record."""
    top = _record(node)
    stack = [(node, top)]
    while stack:
        current, record = stack.pop()
        if current.children:
            child_records = [_record(c) for c in current.children]
            record["children"] = child_records
            stack.extend(zip(current.children, child_records))
    return top


def tree_to_data(tree: Tree) -> list[dict[str, Any]]:
    return [node_to_data(n) for n in tree]


def load_tree_file(path: Path) -> Tree:
    """Read a Tree from a JSON file of nested records."""
    with open(path, encoding="utf-8") as f:
        return parse_tree_data(json.load(f))
