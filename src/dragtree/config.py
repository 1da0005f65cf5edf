"""Configuration constants for dragtree."""

import os
from pathlib import Path

# Environment variable naming the tree file served by the MCP server.
TREE_FILE_ENV: str = "DRAGTREE_FILE"

# Fallback tree files. First file found is used.
DEFAULT_TREE_FILES: list[Path] = [
    Path("~/.config/dragtree/tree.json").expanduser(),
    Path("~/.local/share/dragtree/tree.json").expanduser(),
]


def resolve_tree_file() -> Path | None:
    """Return the tree file to load at startup, or None to start empty."""
    from_env = os.environ.get(TREE_FILE_ENV)
    if from_env:
        return Path(from_env).expanduser()
    for candidate in DEFAULT_TREE_FILES:
        if candidate.is_file():
            return candidate
    return None
