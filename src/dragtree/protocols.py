"""Protocols for collaborators of the drag-and-drop engine."""

from typing import Protocol, runtime_checkable

from dragtree.models.node import Tree


@runtime_checkable
class TreeListener(Protocol):
    """Protocol for observers of a host's tree (e.g. a render pass)."""

    def on_tree_replaced(self, old: Tree, new: Tree) -> None:
        """Called after the host swapped its snapshot for a new one."""
        ...
