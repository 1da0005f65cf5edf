"""CLI for dragtree (show, locate, move, replay, MCP server)."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from dragtree.core.drag.host import TreeHost, parse_address
from dragtree.core.importer.json_reader import load_tree_file, node_to_data, tree_to_data
from dragtree.core.tree.addressing import compute_move, locate
from dragtree.core.tree.markdown import render_tree_as_markdown
from dragtree.logging_config import configure_logging
from dragtree.models.node import Position, Rejected, Tree

app = typer.Typer(help="dragtree: rearrange nested outlines with drag-and-drop moves.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _load(tree_file: Path) -> Tree:
    """Load a tree file, exiting with an error if it is missing or malformed."""
    if not tree_file.exists():
        logger.error("Tree file not found: {}", tree_file)
        raise typer.Exit(1)
    try:
        return load_tree_file(tree_file)
    except ValueError as e:
        logger.error("Cannot read tree from {}: {}", tree_file, e)
        raise typer.Exit(1) from None


def _address(raw: str) -> tuple[int, ...]:
    try:
        return parse_address(raw)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1) from None


def _echo_tree(tree: Tree, *, output_json: bool) -> None:
    if output_json:
        typer.echo(json.dumps(tree_to_data(tree), indent=2))
    else:
        typer.echo(render_tree_as_markdown(tree, show_addresses=True), nl=False)


@app.command()
def show(
    tree_file: Path = typer.Argument(..., help="JSON file with nested records"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    addresses: bool = typer.Option(False, "--addresses", "-a", help="Show node addresses"),
    collapsed: bool = typer.Option(
        False, "--collapsed", "-c", help="Hide children of collapsed nodes"
    ),
) -> None:
    """Print a tree as a markdown outline."""
    tree = _load(tree_file)
    typer.echo(
        render_tree_as_markdown(
            tree, max_depth=max_depth, show_addresses=addresses, respect_collapsed=collapsed
        ),
        nl=False,
    )


@app.command(name="locate")
def locate_cmd(
    tree_file: Path = typer.Argument(..., help="JSON file with nested records"),
    address: str = typer.Argument(..., help="Dotted address, e.g. 0.1"),
) -> None:
    """Print the node at an address as JSON."""
    tree = _load(tree_file)
    node = locate(tree, _address(address))
    if node is None:
        typer.echo(f"Nothing at address '{address}'.")
        raise typer.Exit(1)
    typer.echo(json.dumps(node_to_data(node), indent=2))


@app.command()
def move(
    tree_file: Path = typer.Argument(..., help="JSON file with nested records"),
    source: str = typer.Argument(..., help="Address of the node to move"),
    target: str = typer.Argument(..., help="Address of the drop target"),
    position: Position = typer.Option(
        Position.AFTER, "--position", "-p", help="Drop position relative to the target"
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Move a subtree and print the resulting tree."""
    tree = _load(tree_file)
    result = compute_move(tree, _address(source), _address(target), position)
    if isinstance(result, Rejected):
        typer.echo(f"Move rejected: {result.reason}")
        raise typer.Exit(1)
    _echo_tree(result, output_json=output_json)


@app.command()
def replay(
    tree_file: Path = typer.Argument(..., help="JSON file with nested records"),
    events_file: Path = typer.Argument(..., help="JSON list of drag events"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Replay recorded drag events against a tree and print the result."""
    tree = _load(tree_file)
    if not events_file.exists():
        logger.error("Events file not found: {}", events_file)
        raise typer.Exit(1)

    with open(events_file, encoding="utf-8") as f:
        try:
            events = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Cannot parse events from {}: {}", events_file, e)
            raise typer.Exit(1) from None
    if not isinstance(events, list):
        logger.error("Events file {} must contain a JSON list", events_file)
        raise typer.Exit(1)

    host = TreeHost(tree)
    try:
        final = host.apply_events(events)
    except ValueError as e:
        logger.error("Bad event in {}: {}", events_file, e)
        raise typer.Exit(1) from None
    _echo_tree(final, output_json=output_json)


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from dragtree.mcp.server import run_mcp_server

    run_mcp_server()
