"""Drag-and-drop tree rearrangement engine."""

from dragtree.core.drag.controller import DragController
from dragtree.core.drag.host import TreeHost
from dragtree.core.tree.addressing import compute_move, insert, is_ancestor, locate, remove
from dragtree.models.node import DragState, Node, Position, Rejected
from dragtree.protocols import TreeListener

__all__ = [
    "DragController",
    "DragState",
    "Node",
    "Position",
    "Rejected",
    "TreeHost",
    "TreeListener",
    "compute_move",
    "insert",
    "is_ancestor",
    "locate",
    "remove",
]
