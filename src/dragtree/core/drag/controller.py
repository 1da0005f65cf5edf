"""Drag interaction state machine driving tree moves from pointer events."""

from collections.abc import Sequence

from loguru import logger

from dragtree.core.tree.addressing import compute_move, is_ancestor, locate
from dragtree.models.node import DragSource, DragState, Node, Position, Rejected, Tree


class DragController:
    """Holds the transient state of a single drag gesture.

    The controller never owns the tree. ``commit`` takes the caller's current
    snapshot and hands back the replacement, or None when the drop is a no-op.
    Every path out of a drag (drop, rejection, cancel) returns to idle.
    """

    def __init__(self) -> None:
        self._state = DragState()

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return not self._state.is_idle

    @property
    def hover_rejected(self) -> bool:
        """True when the current hover would drop the source into itself or its subtree."""
        state = self._state
        if state.source is None or state.hover_target is None:
            return False
        source = state.source.address
        if is_ancestor(source, state.hover_target):
            return True
        return source == state.hover_target and state.hover_position is Position.INSIDE

    def begin_drag(self, node: Node, address: Sequence[int]) -> bool:
        """Start dragging ``node``. Ignored while another drag is in progress."""
        if self.is_dragging:
            logger.debug(
                "Ignoring drag of {!r}: already dragging {!r}",
                node.identifier,
                self._state.source.node.identifier if self._state.source else None,
            )
            return False
        if not address:
            logger.debug("Ignoring drag of {!r}: empty address", node.identifier)
            return False

        self._state = DragState(source=DragSource(node=node, address=tuple(address)))
        logger.debug("Drag started: {!r} at {}", node.identifier, tuple(address))
        return True

    def update_hover(self, address: Sequence[int], position: Position) -> bool:
        """Record the drop target under the pointer. The latest call always wins."""
        if self._state.source is None:
            logger.debug("Ignoring hover over {}: no drag in progress", tuple(address))
            return False

        self._state = DragState(
            source=self._state.source,
            hover_target=tuple(address),
            hover_position=position,
        )
        return True

    def commit(self, tree: Tree) -> Tree | None:
        """Drop the dragged node at the hovered target.

        Args:
            tree: The caller's current snapshot.

        Returns:
            The new tree on success; None when there was nothing to drop or the
            move was rejected. The controller is idle afterwards in both cases.
        """
        state = self._state
        self._state = DragState()

        if state.source is None or state.hover_target is None or state.hover_position is None:
            logger.debug("Drop ignored: no source or hover target")
            return None

        source = state.source
        current = locate(tree, source.address)
        if current is None or current.identifier != source.node.identifier:
            logger.debug(
                "Drop rejected: {!r} is no longer at {}", source.node.identifier, source.address
            )
            return None

        result = compute_move(tree, source.address, state.hover_target, state.hover_position)
        if isinstance(result, Rejected):
            logger.debug("Drop rejected: {}", result.reason)
            return None

        logger.info(
            "Moved {!r} {} {}",
            source.node.identifier,
            state.hover_position.value,
            state.hover_target,
        )
        return result

    def cancel(self) -> None:
        """Abort any drag in progress."""
        if self.is_dragging:
            logger.debug("Drag cancelled")
        self._state = DragState()
