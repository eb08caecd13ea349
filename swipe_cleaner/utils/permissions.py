"""Permission checking utilities."""

import os
from pathlib import Path


def check_path_readable(path: Path) -> bool:
    """Check that a directory can be listed."""
    if not path.is_dir():
        return False
    if not os.access(str(path), os.R_OK | os.X_OK):
        return False
    try:
        next(path.iterdir(), None)
    except PermissionError:
        return False
    return True


def check_path_writable(path: Path) -> bool:
    """Check if a destination path is writable."""
    p = Path(path)
    if p.exists():
        return os.access(str(p), os.W_OK)
    # Check parent
    parent = p.parent
    while not parent.exists():
        parent = parent.parent
    return os.access(str(parent), os.W_OK)
