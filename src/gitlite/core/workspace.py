"""Workspace file enumeration."""

import os
from pathlib import Path
from typing import List, Optional

from gitlite.constants import GITLITE_DIR


def list_files(workspace_root: Path, start: Optional[Path] = None) -> List[str]:
    """List files beneath ``start`` as paths relative to the workspace root.

    The repository directory is never descended into. Paths use the host
    separator and are returned in sorted order.

    Args:
        workspace_root: Root directory of the workspace
        start: Directory to enumerate (default: the workspace root)

    Returns:
        Relative path strings
    """
    workspace_root = Path(workspace_root)
    start = Path(start) if start is not None else workspace_root

    files = []
    for dirpath, dirnames, filenames in os.walk(start):
        current = Path(dirpath)
        if current == workspace_root:
            dirnames[:] = [d for d in dirnames if d != GITLITE_DIR]
        dirnames.sort()

        for filename in sorted(filenames):
            files.append(str((current / filename).relative_to(workspace_root)))

    return files


def is_repository_path(workspace_root: Path, abs_path: Path) -> bool:
    """Check if a path lies inside the repository directory."""
    try:
        abs_path.relative_to(Path(workspace_root) / GITLITE_DIR)
        return True
    except ValueError:
        return False
