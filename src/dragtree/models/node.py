"""Domain models for the drag-and-drop tree engine."""

from dataclasses import dataclass
from enum import Enum

Address = tuple[int, ...]


@dataclass(frozen=True)
class Node:
    """A single item in a tree, together with its whole subtree."""

    identifier: str
    label: str
    children: tuple["Node", ...] = ()
    expanded: bool = True


Tree = tuple[Node, ...]


class Position(Enum):
    """Where a dragged node lands relative to its drop target."""

    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"


@dataclass(frozen=True)
class DragSource:
    """The node being dragged and its address at drag start."""

    node: Node
    address: Address


@dataclass(frozen=True)
class DragState:
    """Transient state of a drag gesture.

    Hover fields are either both set or both unset, and only ever set while a
    source is being dragged.
    """

    source: DragSource | None = None
    hover_target: Address | None = None
    hover_position: Position | None = None

    def __post_init__(self) -> None:
        if (self.hover_target is None) != (self.hover_position is None):
            msg = f"Hover target and position must be set together: {self!r}"
            raise ValueError(msg)
        if self.source is None and self.hover_target is not None:
            msg = f"Hover set without a drag source: {self!r}"
            raise ValueError(msg)

    @property
    def is_idle(self) -> bool:
        return self.source is None


@dataclass(frozen=True)
class Rejected:
    """A move that was refused; the tree stays unchanged."""

    reason: str
