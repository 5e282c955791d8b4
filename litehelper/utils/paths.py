# litehelper/utils/paths.py
"""
Path resolution for database files.
A database is identified by folder + logical name.
Never use startswith() for path containment checks.
"""
from pathlib import Path

from litehelper.core.exceptions import InvalidDatabaseName


def resolve_database_path(folder: Path, name: str) -> Path:
    """
    Resolve the file for database `name` inside `folder`.

    Pipeline:
    1. Reject empty and absolute names.
    2. Join folder / name and resolve.
    3. Confirm the result stays under folder.

    Raises:
        InvalidDatabaseName: if the name is empty, absolute or escapes folder
    """
    if not name or Path(name).is_absolute():
        raise InvalidDatabaseName(name)

    root = Path(folder).resolve()
    resolved = (root / name).resolve()
    if not _is_relative_to(resolved, root) or resolved == root:
        raise InvalidDatabaseName(name)
    return resolved


def ensure_parent(path: Path) -> None:
    """Create missing parent directories of path."""
    path.parent.mkdir(parents=True, exist_ok=True)


def _is_relative_to(path: Path, root: Path) -> bool:
    """Safe relative_to check: returns bool instead of raising."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False
