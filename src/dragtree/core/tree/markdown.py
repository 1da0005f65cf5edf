"""Render tree snapshots as markdown outlines."""

import io

from dragtree.models.node import Node, Tree


def render_tree_as_markdown(
    tree: Tree,
    *,
    max_depth: int | None = None,
    show_addresses: bool = False,
    respect_collapsed: bool = False,
) -> str:
    """Render a tree as an indented markdown bullet list.

    Args:
        tree: The snapshot to render.
        max_depth: Max levels below the roots to include (None = unlimited).
        show_addresses: Prefix each item with its dotted address.
        respect_collapsed: Hide the children of collapsed nodes.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    stack: list[tuple[int, tuple[int, ...], Node]] = [
        (0, (i,), n) for i, n in reversed(list(enumerate(tree)))
    ]
    while stack:
        depth, address, node = stack.pop()
        indent = "    " * depth
        lines = node.label.split("\n")
        marker = f"`{'.'.join(map(str, address))}` " if show_addresses else ""
        out.write(f"{indent}- {marker}{lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if not node.children:
            continue

        child_count = len(node.children)
        noun = "child" if child_count == 1 else "children"
        child_indent = "    " * (depth + 1)
        if respect_collapsed and not node.expanded:
            out.write(f"{child_indent}- ... ({child_count} {noun} collapsed)\n")
        elif max_depth is not None and depth >= max_depth:
            out.write(f"{child_indent}- ... ({child_count} more {noun}, id={node.identifier})\n")
        else:
            stack.extend(
                (depth + 1, (*address, i), c) for i, c in reversed(list(enumerate(node.children)))
            )

    return out.getvalue()
