# litehelper/db/connection.py
"""
Physical open of one SQLite file, plus the schema version record.

Two open modes:
  - writable:  mode=rwc, creates the file and parent directories.
  - read-only: mode=ro plus PRAGMA query_only = ON; never creates the file.

Every connection:
  - autocommit (isolation_level=None): transactions are explicit.
  - check_same_thread=False: one handle is shared by all callers of a
    helper; the helper lock serialises open/migrate/close.
  - rows come back as sqlite3.Row.

The schema version lives in a one-row table inside the same file:
    schema(user_version INTEGER NOT NULL, created_at INTEGER, updated_at INTEGER)
Timestamps are epoch milliseconds. No row means version 0.
"""
from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Optional

from litehelper.core.constants import NO_SCHEMA_VERSION, SCHEMA_TABLE
from litehelper.core.exceptions import StorageUnavailable
from litehelper.db.handle import Handle
from litehelper.db.log import LogSink
from litehelper.utils.paths import ensure_parent

_log = logging.getLogger("litehelper.db.connection")

_SCHEMA_DDL = f"""
CREATE TABLE IF NOT EXISTS {SCHEMA_TABLE} (
    user_version INTEGER NOT NULL,
    created_at   INTEGER,
    updated_at   INTEGER
)
"""

# Pragmas accepted by apply_pragmas, mapped to their value formatter
_PRAGMAS = {
    "foreign_keys": lambda v: "ON" if v else "OFF",
    "journal_mode": str,
    "synchronous": str,
    "temp_store": str,
    "busy_timeout": int,
    "cache_size": int,
}


def open_database(
    path: Path,
    writable: bool,
    sink: Optional[LogSink] = None,
    strict: bool = False,
) -> Handle:
    """
    Open path in the requested mode and wrap it in a Handle.
    Writable opens ensure the schema version table exists.
    Raises StorageUnavailable if the file cannot be opened or created.
    """
    path = Path(path)
    mode = "rwc" if writable else "ro"
    try:
        ensure_parent(path)
        conn = sqlite3.connect(
            f"{path.resolve().as_uri()}?mode={mode}",
            uri=True,
            check_same_thread=False,
            isolation_level=None,
        )
    except (sqlite3.Error, OSError) as exc:
        raise StorageUnavailable(path, exc) from exc

    conn.row_factory = sqlite3.Row
    handle = Handle(conn, path=path, read_only=not writable, sink=sink, strict=strict)
    try:
        if writable:
            handle.exec_sql(_SCHEMA_DDL)
        else:
            handle.exec_sql("PRAGMA query_only = ON")
            # mode=ro opens lazily; touch the file so a bad path fails here
            get_schema_version(handle)
    except sqlite3.Error as exc:
        handle.close()
        raise StorageUnavailable(path, exc) from exc

    _log.debug("database opened (%s): %s", "rw" if writable else "ro", path)
    return handle


def apply_pragmas(handle: Handle, **pragmas: Any) -> None:
    """
    Apply selected pragmas, e.g. apply_pragmas(h, foreign_keys=True, journal_mode="WAL").
    Unknown names raise ValueError. Meant for OpenHelper.on_configure.
    """
    for name, value in pragmas.items():
        fmt = _PRAGMAS.get(name)
        if fmt is None:
            raise ValueError(f"unsupported pragma: {name!r}")
        handle.exec_sql(f"PRAGMA {name} = {fmt(value)}")


def _has_schema_table(handle: Handle) -> bool:
    with handle.query(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        SCHEMA_TABLE,
    ) as cur:
        return cur.fetchone() is not None


def get_schema_version(handle: Handle) -> int:
    """Read the persisted schema version. Missing table or row reads as 0."""
    if not _has_schema_table(handle):
        return NO_SCHEMA_VERSION
    with handle.query(f"SELECT user_version FROM {SCHEMA_TABLE} LIMIT 1") as cur:
        row = cur.fetchone()
    return row["user_version"] if row is not None else NO_SCHEMA_VERSION


def set_schema_version(handle: Handle, version: int) -> None:
    """Persist version. Runs inside the caller's transaction, if any."""
    now_ms = int(time.time() * 1000)
    with handle.query(f"SELECT user_version FROM {SCHEMA_TABLE} LIMIT 1") as cur:
        exists = cur.fetchone() is not None
    if exists:
        handle.execute_update(
            f"UPDATE {SCHEMA_TABLE} SET user_version = ?, updated_at = ?",
            int(version), now_ms,
        )
    else:
        handle.execute_update(
            f"INSERT INTO {SCHEMA_TABLE}(user_version, created_at) VALUES (?, ?)",
            int(version), now_ms,
        )
