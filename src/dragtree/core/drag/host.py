"""Caller-side owner of the tree snapshot, fed by discrete drag events."""

from collections.abc import Iterable, Sequence
from typing import Any

from loguru import logger

from dragtree.core.drag.controller import DragController
from dragtree.core.tree.addressing import locate, set_expanded
from dragtree.models.node import Position, Tree
from dragtree.protocols import TreeListener

EVENT_TYPES = ("dragstart", "dragover", "drop", "dragend", "toggle")


class TreeHost:
    """Holds the current tree and one drag controller.

    A successful drop replaces the held tree before the handler returns, so the
    next event always sees the post-move snapshot.
    """

    def __init__(self, tree: Tree = (), *, listeners: Iterable[TreeListener] = ()) -> None:
        self.tree: Tree = tree
        self.controller = DragController()
        self.listeners: list[TreeListener] = list(listeners)

    def _replace(self, new: Tree) -> None:
        old = self.tree
        self.tree = new
        for listener in self.listeners:
            listener.on_tree_replaced(old, new)

    def drag_start(self, address: Sequence[int]) -> bool:
        """Begin dragging the node currently at ``address``."""
        node = locate(self.tree, address)
        if node is None:
            logger.debug("Drag start ignored: nothing at {}", tuple(address))
            return False
        return self.controller.begin_drag(node, address)

    def drag_over(self, address: Sequence[int], position: Position) -> bool:
        return self.controller.update_hover(address, position)

    def drop(self) -> bool:
        """Commit the drag. Returns True if the tree was replaced."""
        new = self.controller.commit(self.tree)
        if new is None:
            return False
        self._replace(new)
        return True

    def drag_end(self) -> None:
        self.controller.cancel()

    def toggle(self, address: Sequence[int]) -> bool:
        """Flip the expanded flag of the node at ``address``."""
        node = locate(self.tree, address)
        if node is None:
            return False
        new = set_expanded(self.tree, address, not node.expanded)
        if new is None:
            return False
        self._replace(new)
        return True

    def apply_event(self, event: dict[str, Any]) -> bool:
        """Dispatch one event record.

        Records look like ``{"type": "dragover", "address": [0, 1], "position": "after"}``.
        ``drop`` and ``dragend`` take no address.

        Raises:
            ValueError: If the record is malformed.
        """
        if not isinstance(event, dict):
            msg = f"Event must be a record, got {event!r}"
            raise ValueError(msg)
        event_type = event.get("type")
        if event_type not in EVENT_TYPES:
            msg = f"Unknown event type {event_type!r}, expected one of {EVENT_TYPES!r}"
            raise ValueError(msg)

        if event_type == "drop":
            return self.drop()
        if event_type == "dragend":
            self.drag_end()
            return True

        address = parse_address(event.get("address"))
        if event_type == "dragstart":
            return self.drag_start(address)
        if event_type == "toggle":
            return self.toggle(address)

        try:
            position = Position(event.get("position"))
        except ValueError:
            msg = f"Invalid drop position in event: {event!r}"
            raise ValueError(msg) from None
        return self.drag_over(address, position)

    def apply_events(self, events: Iterable[dict[str, Any]]) -> Tree:
        """Replay events in order and return the final tree."""
        for event in events:
            self.apply_event(event)
        return self.tree


def parse_address(raw: Any) -> tuple[int, ...]:
    """Parse an address from a list of ints or a dotted string like ``"0.2.1"``.

    Raises:
        ValueError: If ``raw`` is not a non-empty address of non-negative ints.
    """
    if isinstance(raw, str):
        try:
            parts = [int(p) for p in raw.split(".")] if raw else []
        except ValueError:
            msg = f"Invalid address {raw!r}"
            raise ValueError(msg) from None
    elif isinstance(raw, list | tuple) and all(
        isinstance(p, int) and not isinstance(p, bool) for p in raw
    ):
        parts = list(raw)
    else:
        msg = f"Invalid address {raw!r}"
        raise ValueError(msg)

    if not parts or any(p < 0 for p in parts):
        msg = f"Invalid address {raw!r}"
        raise ValueError(msg)
    return tuple(parts)
