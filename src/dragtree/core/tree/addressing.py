"""Tree addressing: locate, remove, insert and move nodes by sibling-index address.

Every function here is pure. Trees are never modified in place; each mutation
builds new tuples along the root-to-target path and shares every untouched
subtree with the input snapshot.
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import replace

from dragtree.models.node import Address, Node, Position, Rejected, Tree

SiblingsFn = Callable[[Tree], Tree]


def locate(tree: Tree, address: Sequence[int]) -> Node | None:
    """Return the node at ``address``, or None if any index is out of range.

    The empty address never resolves.
    """
    if not address:
        return None

    siblings = tree
    node: Node | None = None
    for index in address:
        if node is not None:
            siblings = node.children
        if not 0 <= index < len(siblings):
            return None
        node = siblings[index]
    return node


def is_ancestor(candidate_ancestor: Sequence[int], candidate_descendant: Sequence[int]) -> bool:
    """True iff ``candidate_ancestor`` is a strict prefix of ``candidate_descendant``."""
    if len(candidate_ancestor) >= len(candidate_descendant):
        return False
    return tuple(candidate_descendant[: len(candidate_ancestor)]) == tuple(candidate_ancestor)


def _update_children(tree: Tree, path: Sequence[int], fn: SiblingsFn) -> Tree | None:
    """Apply ``fn`` to the children of the node at ``path`` (the roots if ``path`` is empty).

    Walks down collecting each level's siblings, then rebuilds the path bottom-up,
    so depth is not bounded by the interpreter's recursion limit.

    Returns the rebuilt tree, or None if ``path`` does not resolve.
    """
    trail: list[tuple[Tree, int]] = []
    siblings = tree
    for index in path:
        if not 0 <= index < len(siblings):
            return None
        trail.append((siblings, index))
        siblings = siblings[index].children

    rebuilt = fn(siblings)
    for siblings, index in reversed(trail):
        node = replace(siblings[index], children=rebuilt)
        rebuilt = (*siblings[:index], node, *siblings[index + 1 :])
    return rebuilt


def _as_position(position: Position | str) -> Position | None:
    try:
        return Position(position)
    except ValueError:
        return None


def remove(tree: Tree, address: Sequence[int]) -> tuple[Tree, Node] | None:
    """Excise the node at ``address`` from its sibling sequence.

    Args:
        tree: The snapshot to remove from.
        address: Address of the node to remove.

    Returns:
        Tuple of (new tree, removed node) with the removed subtree intact,
        or None if the address does not resolve.
    """
    removed = locate(tree, address)
    if removed is None:
        return None

    index = address[-1]
    new_tree = _update_children(tree, address[:-1], lambda s: (*s[:index], *s[index + 1 :]))
    if new_tree is None:
        return None
    return new_tree, removed


def insert(
    tree: Tree,
    node: Node,
    target_address: Sequence[int],
    position: Position | str,
) -> Tree | None:
    """Insert ``node`` relative to the node at ``target_address``.

    BEFORE/AFTER place ``node`` next to the target within the target's sibling
    sequence. INSIDE makes ``node`` the first child of the target. ``position``
    may also be given by value (``"before"``, ``"after"``, ``"inside"``).

    Returns:
        The new tree, or None if the target does not resolve or ``position`` is
        not a drop position.
    """
    drop_position = _as_position(position)
    if drop_position is None or locate(tree, target_address) is None:
        return None

    if drop_position is Position.INSIDE:
        return _update_children(tree, target_address, lambda s: (node, *s))

    offset = target_address[-1] if drop_position is Position.BEFORE else target_address[-1] + 1
    return _update_children(
        tree, target_address[:-1], lambda s: (*s[:offset], node, *s[offset:])
    )


def _adjust_target(source: Address, target: Address) -> Address:
    """Correct ``target`` for the index shift caused by removing ``source``.

    Removing the source shifts its later siblings down by one. Any target whose
    path passes through one of those later siblings (the target itself, or one
    of its ancestors) has the index at that level decremented.
    """
    level = len(source) - 1
    if (
        len(target) > level
        and target[:level] == source[:level]
        and target[level] > source[level]
    ):
        return (*target[:level], target[level] - 1, *target[level + 1 :])
    return target


def compute_move(
    tree: Tree,
    source_address: Sequence[int],
    target_address: Sequence[int],
    position: Position | str,
) -> Tree | Rejected:
    """Move the subtree at ``source_address`` to ``position`` relative to ``target_address``.

    The move is a remove followed by an insert on immutable snapshots, so the
    caller either gets a complete new tree or a Rejected value and keeps its
    current tree.

    Args:
        tree: The current snapshot.
        source_address: Address of the node being moved.
        target_address: Address of the drop target, computed on ``tree``.
        position: Drop position relative to the target, as a member or its value.

    Returns:
        The new tree, or Rejected when the move would create a cycle or an
        address or the position does not resolve.
    """
    source = tuple(source_address)
    target = tuple(target_address)
    drop_position = _as_position(position)
    if drop_position is None:
        return Rejected(f"unknown drop position {position!r}")

    if is_ancestor(source, target):
        return Rejected(f"cannot drop {source} into its own subtree at {target}")
    if locate(tree, source) is None:
        return Rejected(f"source {source} not found")
    if locate(tree, target) is None:
        return Rejected(f"target {target} not found")
    if source == target:
        if drop_position is Position.INSIDE:
            return Rejected(f"cannot drop {source} inside itself")
        # Dropped where it already is.
        return tree

    removed = remove(tree, source)
    if removed is None:
        return Rejected(f"source {source} not found")
    intermediate, moved = removed

    result = insert(intermediate, moved, _adjust_target(source, target), drop_position)
    if result is None:
        return Rejected(f"target {target} not found after removing {source}")
    return result


def iter_nodes(tree: Tree, prefix: Address = ()) -> Iterator[tuple[Address, Node]]:
    """Yield (address, node) for every node, depth-first in display order."""
    stack = [((*prefix, i), n) for i, n in reversed(list(enumerate(tree)))]
    while stack:
        address, node = stack.pop()
        yield address, node
        stack.extend(((*address, i), c) for i, c in reversed(list(enumerate(node.children))))


def address_of(tree: Tree, identifier: str) -> Address | None:
    """Find the current address of the node with ``identifier``."""
    return next((a for a, n in iter_nodes(tree) if n.identifier == identifier), None)


def count_nodes(tree: Tree) -> int:
    return sum(1 for _ in iter_nodes(tree))


def set_expanded(tree: Tree, address: Sequence[int], expanded: bool) -> Tree | None:
    """Return a tree with the ``expanded`` flag of one node changed, or None if not found."""
    node = locate(tree, address)
    if node is None:
        return None

    index = address[-1]
    updated = replace(node, expanded=expanded)
    return _update_children(
        tree, address[:-1], lambda s: (*s[:index], updated, *s[index + 1 :])
    )
