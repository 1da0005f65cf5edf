"""MCP server exposing tree moves and drag gestures as tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from dragtree.config import resolve_tree_file
from dragtree.core.drag.host import TreeHost, parse_address
from dragtree.core.importer.json_reader import load_tree_file, node_to_data, tree_to_data
from dragtree.core.tree.addressing import address_of, count_nodes, locate
from dragtree.core.tree.markdown import render_tree_as_markdown
from dragtree.models.node import Position


def _format_address(address: tuple[int, ...] | None) -> str | None:
    return ".".join(map(str, address)) if address is not None else None


def _drag_state(host: TreeHost) -> dict[str, Any]:
    state = host.controller.state
    return {
        "dragging": host.controller.is_dragging,
        "source_id": state.source.node.identifier if state.source else None,
        "source_address": _format_address(state.source.address) if state.source else None,
        "hover_target": _format_address(state.hover_target),
        "hover_position": state.hover_position.value if state.hover_position else None,
        "hover_rejected": host.controller.hover_rejected,
    }


def _parse_position(position: str) -> Position | None:
    try:
        return Position(position.lower())
    except ValueError:
        return None


# --- Core functions (testable without MCP context) ---


def tree_show(
    host: TreeHost,
    *,
    output_format: str = "markdown",
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Return the current tree as a markdown outline or nested JSON records."""
    output: dict[str, Any] = {"node_count": count_nodes(host.tree)}
    if output_format == "json":
        output["tree"] = tree_to_data(host.tree)
    else:
        output["content"] = render_tree_as_markdown(
            host.tree, max_depth=max_depth, show_addresses=True
        )
    return output


def tree_locate(
    host: TreeHost,
    *,
    address: str | None = None,
    node_id: str | None = None,
) -> dict[str, Any]:
    """Look a node up by dotted address or by identifier."""
    if address is None and node_id is None:
        return {"error": "Pass an address or a node_id."}

    if node_id is not None:
        found = address_of(host.tree, node_id)
        if found is None:
            return {"error": f"Node '{node_id}' not found."}
        parsed = found
    else:
        try:
            parsed = parse_address(address)
        except ValueError as e:
            return {"error": str(e)}

    node = locate(host.tree, parsed)
    if node is None:
        return {"error": f"Nothing at address '{_format_address(parsed)}'."}
    return {"address": _format_address(parsed), "node": node_to_data(node)}


def tree_move(
    host: TreeHost,
    *,
    source: str,
    target: str,
    position: str = "after",
) -> dict[str, Any]:
    """Move a subtree as one complete drag gesture."""
    parsed_position = _parse_position(position)
    if parsed_position is None:
        return {"success": False, "error": f"Invalid position '{position}'."}
    try:
        source_address = parse_address(source)
        target_address = parse_address(target)
    except ValueError as e:
        return {"success": False, "error": str(e)}

    if host.controller.is_dragging:
        return {"success": False, "error": "A drag is already in progress."}
    if not host.drag_start(source_address):
        return {"success": False, "error": f"Nothing at address '{source}'."}
    host.drag_over(target_address, parsed_position)
    if not host.drop():
        return {"success": False, "error": "Move rejected; tree unchanged."}
    return {"success": True, "node_count": count_nodes(host.tree)}


def tree_toggle(host: TreeHost, *, address: str) -> dict[str, Any]:
    """Expand or collapse the node at an address."""
    try:
        parsed = parse_address(address)
    except ValueError as e:
        return {"success": False, "error": str(e)}
    if not host.toggle(parsed):
        return {"success": False, "error": f"Nothing at address '{address}'."}
    node = locate(host.tree, parsed)
    return {"success": True, "expanded": node.expanded if node else None}


def drag_begin(host: TreeHost, *, address: str) -> dict[str, Any]:
    try:
        parsed = parse_address(address)
    except ValueError as e:
        return {"success": False, "error": str(e), "state": _drag_state(host)}
    accepted = host.drag_start(parsed)
    return {"success": accepted, "state": _drag_state(host)}


def drag_hover(host: TreeHost, *, address: str, position: str) -> dict[str, Any]:
    parsed_position = _parse_position(position)
    if parsed_position is None:
        return {
            "success": False,
            "error": f"Invalid position '{position}'.",
            "state": _drag_state(host),
        }
    try:
        parsed = parse_address(address)
    except ValueError as e:
        return {"success": False, "error": str(e), "state": _drag_state(host)}
    accepted = host.drag_over(parsed, parsed_position)
    return {"success": accepted, "state": _drag_state(host)}


def drag_commit(host: TreeHost) -> dict[str, Any]:
    changed = host.drop()
    return {"success": changed, "state": _drag_state(host)}


def drag_cancel(host: TreeHost) -> dict[str, Any]:
    host.drag_end()
    return {"success": True, "state": _drag_state(host)}


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    host: TreeHost
    tree_file: Path | None


def _load_initial_host(tree_file: Path | None) -> TreeHost:
    if tree_file is None or not tree_file.exists():
        logger.info("Starting with an empty tree")
        return TreeHost()
    tree = load_tree_file(tree_file)
    logger.info("Loaded {} nodes from {}", count_nodes(tree), tree_file)
    return TreeHost(tree)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the tree on startup. Nothing is written back on shutdown."""
    tree_file = resolve_tree_file()
    yield ServerContext(host=_load_initial_host(tree_file), tree_file=tree_file)


mcp_server = FastMCP(
    "dragtree",
    instructions="""\
dragtree holds one in-memory outline. Nodes are addressed by dotted sibling
indices from the root, e.g. "0" is the first root item and "0.2" its third child.

## Addresses Change After Every Move

Always call tree_show_tool (or tree_locate_tool with a node_id) before a move;
addresses from an earlier snapshot may point at a different node now.

## Moving Nodes
- tree_move_tool moves a subtree in one step: position "before"/"after" makes it
  a sibling of the target, "inside" makes it the target's first child.
- Dropping a node into itself or its own subtree is rejected; the tree is left
  unchanged.
- drag_begin_tool / drag_hover_tool / drag_commit_tool / drag_cancel_tool drive the
  same move step by step, like a pointer would.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def tree_show_tool(
    ctx: Context,
    output_format: str = "markdown",
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Show the current tree with node addresses.

    Args:
        output_format: "markdown" (outline with addresses) or "json" (nested records).
        max_depth: Max depth levels for markdown (None = unlimited).
    """
    return tree_show(_ctx(ctx).host, output_format=output_format, max_depth=max_depth)


@mcp_server.tool()
async def tree_locate_tool(
    ctx: Context,
    address: str | None = None,
    node_id: str | None = None,
) -> dict[str, Any]:
    """Find a node by dotted address or by its id, returning its current address.

    Args:
        address: Dotted address such as "0.1".
        node_id: Stable node identifier.
    """
    return tree_locate(_ctx(ctx).host, address=address, node_id=node_id)


@mcp_server.tool()
async def tree_move_tool(
    ctx: Context,
    source: str,
    target: str,
    position: str = "after",
) -> dict[str, Any]:
    """Move the subtree at source to a position relative to target.

    Args:
        source: Dotted address of the node to move.
        target: Dotted address of the drop target (in the current tree).
        position: "before", "after" or "inside" (first child of target).
    """
    return tree_move(_ctx(ctx).host, source=source, target=target, position=position)


@mcp_server.tool()
async def tree_toggle_tool(ctx: Context, address: str) -> dict[str, Any]:
    """Expand or collapse a node.

    Args:
        address: Dotted address of the node.
    """
    return tree_toggle(_ctx(ctx).host, address=address)


@mcp_server.tool()
async def drag_begin_tool(ctx: Context, address: str) -> dict[str, Any]:
    """Start dragging the node at an address. Ignored while another drag is active.

    Args:
        address: Dotted address of the node to drag.
    """
    return drag_begin(_ctx(ctx).host, address=address)


@mcp_server.tool()
async def drag_hover_tool(ctx: Context, address: str, position: str) -> dict[str, Any]:
    """Point the active drag at a drop target.

    Args:
        address: Dotted address of the node under the pointer.
        position: "before", "after" or "inside".
    """
    return drag_hover(_ctx(ctx).host, address=address, position=position)


@mcp_server.tool()
async def drag_commit_tool(ctx: Context) -> dict[str, Any]:
    """Drop the dragged node at the hovered target."""
    return drag_commit(_ctx(ctx).host)


@mcp_server.tool()
async def drag_cancel_tool(ctx: Context) -> dict[str, Any]:
    """Abort the active drag without changing the tree."""
    return drag_cancel(_ctx(ctx).host)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from dragtree.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
