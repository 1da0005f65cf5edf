"""Tests for tree addressing: locate, ancestry, remove, insert, move."""

import pytest

from dragtree.core.importer.json_reader import parse_tree_data
from dragtree.core.tree.addressing import (
    address_of,
    compute_move,
    count_nodes,
    insert,
    is_ancestor,
    iter_nodes,
    locate,
    remove,
    set_expanded,
)
from dragtree.models.node import Node, Position, Rejected, Tree


def _ids(nodes: tuple[Node, ...]) -> list[str]:
    return [n.identifier for n in nodes]


def test_locate_walks_address_from_root(outline_tree: Tree) -> None:
    node = locate(outline_tree, (0, 0, 0))
    assert node is not None
    assert node.identifier == "a1x"
    assert locate(outline_tree, (1,)).identifier == "b"  # type: ignore[union-attr]


@pytest.mark.parametrize(
    "address",
    [(), (3,), (0, 2), (0, 0, 1), (2, 0), (0, 0, 0, 0), (-1,), (0, -1)],
)
def test_locate_returns_none_for_unresolvable_address(outline_tree: Tree, address: tuple) -> None:
    assert locate(outline_tree, address) is None


def test_is_ancestor_requires_strict_prefix() -> None:
    assert is_ancestor((0,), (0, 1))
    assert is_ancestor((0, 1), (0, 1, 4, 2))
    assert not is_ancestor((0, 1), (0, 1))
    assert not is_ancestor((0, 1), (0,))
    assert not is_ancestor((0, 1), (0, 2, 1))
    assert not is_ancestor((1,), (0, 1))


def test_remove_excises_node_and_shifts_later_siblings(outline_tree: Tree) -> None:
    result = remove(outline_tree, (0,))
    assert result is not None
    new_tree, removed = result

    assert _ids(new_tree) == ["b", "c"]
    assert removed.identifier == "a"
    # The whole subtree travels with the removed node.
    assert removed == outline_tree[0]


def test_remove_returns_none_for_missing_address(outline_tree: Tree) -> None:
    assert remove(outline_tree, (0, 5)) is None
    assert remove(outline_tree, ()) is None


def test_remove_shares_untouched_subtrees(outline_tree: Tree) -> None:
    result = remove(outline_tree, (0, 1))
    assert result is not None
    new_tree, _removed = result

    assert new_tree[1] is outline_tree[1]
    assert new_tree[0].children[0] is outline_tree[0].children[0]
    # Input snapshot is untouched.
    assert _ids(outline_tree[0].children) == ["a1", "a2"]


def test_insert_before_and_after_target(outline_tree: Tree) -> None:
    node = Node(identifier="new", label="New")

    before = insert(outline_tree, node, (1,), Position.BEFORE)
    after = insert(outline_tree, node, (1,), Position.AFTER)

    assert before is not None and after is not None
    assert _ids(before) == ["a", "new", "b", "c"]
    assert _ids(after) == ["a", "b", "new", "c"]


def test_insert_inside_becomes_first_child(outline_tree: Tree) -> None:
    node = Node(identifier="new", label="New")

    result = insert(outline_tree, node, (0, 1), Position.INSIDE)

    assert result is not None
    bread = locate(result, (0, 1))
    assert bread is not None
    assert _ids(bread.children) == ["new"]

    result = insert(outline_tree, node, (0,), Position.INSIDE)
    assert result is not None
    assert _ids(result[0].children) == ["new", "a1", "a2"]


def test_insert_returns_none_for_missing_target(outline_tree: Tree) -> None:
    node = Node(identifier="new", label="New")
    assert insert(outline_tree, node, (7,), Position.BEFORE) is None
    assert insert(outline_tree, node, (2, 0), Position.INSIDE) is None
    assert insert(outline_tree, node, (), Position.AFTER) is None


def _reinsert(tree: Tree, node: Node, address: tuple[int, ...]) -> Tree | None:
    """Put ``node`` back at ``address`` in a tree it was removed from."""
    if locate(tree, address) is not None:
        return insert(tree, node, address, Position.BEFORE)
    if address[-1] > 0:
        return insert(tree, node, (*address[:-1], address[-1] - 1), Position.AFTER)
    return insert(tree, node, address[:-1], Position.INSIDE)


def test_remove_then_insert_round_trips_every_address(outline_tree: Tree) -> None:
    for address, _node in iter_nodes(outline_tree):
        result = remove(outline_tree, address)
        assert result is not None
        new_tree, removed = result

        restored = _reinsert(new_tree, removed, address)

        assert restored == outline_tree, address


def test_move_reorders_siblings_forward(parent_tree: Tree) -> None:
    result = compute_move(parent_tree, (0, 0), (0, 1), Position.AFTER)

    assert not isinstance(result, Rejected)
    assert _ids(result[0].children) == ["1-2", "1-1"]


def test_move_parent_into_own_child_is_rejected(parent_tree: Tree) -> None:
    result = compute_move(parent_tree, (0,), (0, 0), Position.INSIDE)
    assert isinstance(result, Rejected)


def test_move_root_before_previous_root() -> None:
    tree = parse_tree_data([{"id": "A"}, {"id": "B"}])

    result = compute_move(tree, (1,), (0,), Position.BEFORE)

    assert not isinstance(result, Rejected)
    assert _ids(result) == ["B", "A"]


def test_move_onto_itself_before_is_noop(outline_tree: Tree) -> None:
    for address, _node in iter_nodes(outline_tree):
        assert compute_move(outline_tree, address, address, Position.BEFORE) == outline_tree
        assert compute_move(outline_tree, address, address, Position.AFTER) == outline_tree


def test_move_inside_self_or_descendant_is_rejected(outline_tree: Tree) -> None:
    addresses = [a for a, _ in iter_nodes(outline_tree)]
    for source in addresses:
        for target in addresses:
            if target == source or is_ancestor(source, target):
                result = compute_move(outline_tree, source, target, Position.INSIDE)
                assert isinstance(result, Rejected), (source, target)


def test_move_to_occupied_position_is_noop(outline_tree: Tree) -> None:
    # "a" is already directly before "b" and after nothing.
    assert compute_move(outline_tree, (0,), (1,), Position.BEFORE) == outline_tree
    assert compute_move(outline_tree, (1,), (0,), Position.AFTER) == outline_tree


def test_move_under_later_sibling_adjusts_nested_target(outline_tree: Tree) -> None:
    """Target lives under a later sibling of the source; its path shifts after removal."""
    result = compute_move(outline_tree, (0,), (1, 0), Position.BEFORE)

    assert not isinstance(result, Rejected)
    assert _ids(result) == ["b", "c"]
    assert _ids(result[0].children) == ["a", "b1"]
    assert result[0].children[0] == outline_tree[0]


def test_move_into_earlier_parent(outline_tree: Tree) -> None:
    result = compute_move(outline_tree, (2,), (0, 0), Position.INSIDE)

    assert not isinstance(result, Rejected)
    assert _ids(result) == ["a", "b"]
    assert _ids(result[0].children[0].children) == ["c", "a1x"]


def test_move_child_out_after_its_parent(outline_tree: Tree) -> None:
    result = compute_move(outline_tree, (0, 0), (0,), Position.AFTER)

    assert not isinstance(result, Rejected)
    assert _ids(result) == ["a", "a1", "b", "c"]
    assert _ids(result[0].children) == ["a2"]


def test_move_preserves_expanded_flags(outline_tree: Tree) -> None:
    result = compute_move(outline_tree, (2,), (0,), Position.BEFORE)

    assert not isinstance(result, Rejected)
    chores = locate(result, (2,))
    assert chores is not None
    assert chores.identifier == "b"
    assert chores.expanded is False


def test_move_with_unresolvable_addresses_is_rejected(outline_tree: Tree) -> None:
    assert isinstance(compute_move(outline_tree, (9,), (0,), Position.AFTER), Rejected)
    assert isinstance(compute_move(outline_tree, (0,), (3,), Position.BEFORE), Rejected)
    assert isinstance(compute_move(outline_tree, (), (0,), Position.BEFORE), Rejected)


def test_address_of_finds_current_address(outline_tree: Tree) -> None:
    assert address_of(outline_tree, "a1x") == (0, 0, 0)
    assert address_of(outline_tree, "c") == (2,)
    assert address_of(outline_tree, "missing") is None


def test_iter_nodes_is_preorder(outline_tree: Tree) -> None:
    ids = [n.identifier for _a, n in iter_nodes(outline_tree)]
    assert ids == ["a", "a1", "a1x", "a2", "b", "b1", "c"]
    assert count_nodes(outline_tree) == 7


def test_set_expanded_changes_only_target(outline_tree: Tree) -> None:
    result = set_expanded(outline_tree, (1,), True)

    assert result is not None
    assert result[1].expanded is True
    assert result[1].children is outline_tree[1].children
    assert result[0] is outline_tree[0]
    assert set_expanded(outline_tree, (4,), False) is None


def test_move_accepts_position_values() -> None:
    tree = (Node("A", "A"), Node("B", "B"))

    moved = compute_move(tree, (1,), (0,), "before")

    assert not isinstance(moved, Rejected)
    assert _ids(moved) == ["B", "A"]


def test_unknown_position_value_is_refused() -> None:
    tree = (Node("A", "A"), Node("B", "B"))

    assert isinstance(compute_move(tree, (1,), (0,), "above"), Rejected)
    assert insert(tree, Node("C", "C"), (0,), "bogus") is None
    inserted = insert(tree, Node("C", "C"), (0,), "inside")
    assert inserted is not None
    assert _ids(inserted[0].children) == ["C"]


CHAIN_DEPTH = 2000


def _chain(depth: int) -> Tree:
    """A single root chain ``n0 > n1 > ...`` followed by one sibling root."""
    node = Node(f"n{depth - 1}", "")
    for i in range(depth - 2, -1, -1):
        node = Node(f"n{i}", "", (node,))
    return (node, Node("sibling", ""))


def test_deep_chain_walks_without_recursion_limit() -> None:
    tree = _chain(CHAIN_DEPTH)
    deepest = (0,) * CHAIN_DEPTH

    assert count_nodes(tree) == CHAIN_DEPTH + 1
    assert address_of(tree, f"n{CHAIN_DEPTH - 1}") == deepest
    assert locate(tree, deepest).identifier == f"n{CHAIN_DEPTH - 1}"  # type: ignore[union-attr]


def test_deep_chain_remove_and_insert() -> None:
    tree = _chain(CHAIN_DEPTH)
    deepest = (0,) * CHAIN_DEPTH

    removed = remove(tree, deepest)
    assert removed is not None
    new_tree, node = removed
    assert node.identifier == f"n{CHAIN_DEPTH - 1}"
    assert locate(new_tree, deepest) is None
    assert locate(new_tree, deepest[:-1]).children == ()  # type: ignore[union-attr]

    inserted = insert(tree, Node("leaf", ""), deepest, Position.INSIDE)
    assert inserted is not None
    assert locate(inserted, (*deepest, 0)).identifier == "leaf"  # type: ignore[union-attr]
    assert inserted[1] is tree[1]


def test_deep_chain_move_leaf_to_sibling_root() -> None:
    tree = _chain(CHAIN_DEPTH)
    deepest = (0,) * CHAIN_DEPTH

    moved = compute_move(tree, deepest, (1,), Position.INSIDE)

    assert not isinstance(moved, Rejected)
    assert locate(moved, (1, 0)).identifier == f"n{CHAIN_DEPTH - 1}"  # type: ignore[union-attr]
    assert locate(moved, deepest) is None
    assert count_nodes(moved) == CHAIN_DEPTH + 1
    assert isinstance(compute_move(tree, (0,), deepest, Position.INSIDE), Rejected)
