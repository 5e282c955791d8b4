# litehelper/db/executor.py
"""
Statement executor: thin synchronous wrapper around one sqlite3.Connection.

Rules:
  - All statements use positional parameters: no string formatting with values.
  - Every result cursor is owned by the caller and must be released:
    use it as a context manager, iterate it to the end, or call close().
  - A cursor whose statement fails is closed before the error propagates.
  - Executed statements are traced through the injected LogSink.
"""
from __future__ import annotations

import sqlite3
from typing import Any, Iterator, Optional

from litehelper.core.constants import NO_GENERATED_ID, NOT_EXECUTED
from litehelper.core.exceptions import HandleClosed
from litehelper.db.log import NULL_SINK, LogSink

TAG = "StatementExecutor"


def _describe(sql: str, args: tuple) -> str:
    return f"{sql} {list(args)}" if args else sql


class ResultCursor:
    """
    Row cursor tied to the statement that produced it.
    Closes itself on context exit or once iteration is exhausted.
    """

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def description(self):
        return self._cursor.description

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._cursor.close()

    def fetchone(self) -> Optional[sqlite3.Row]:
        if self._closed:
            return None
        row = self._cursor.fetchone()
        if row is None:
            self.close()
        return row

    def fetchall(self) -> list[sqlite3.Row]:
        if self._closed:
            return []
        try:
            return self._cursor.fetchall()
        finally:
            self.close()

    def __iter__(self) -> Iterator[sqlite3.Row]:
        while True:
            row = self.fetchone()
            if row is None:
                return
            yield row

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class StatementExecutor:
    """Runs statements against one connection. Base of Handle."""

    def __init__(self, conn: sqlite3.Connection, sink: Optional[LogSink] = None) -> None:
        self._conn = conn
        self._sink = sink or NULL_SINK
        self._closed = False

    @property
    def connection(self) -> sqlite3.Connection:
        self._check_open()
        return self._conn

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise HandleClosed()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def query(self, sql: str, *args: Any) -> ResultCursor:
        """Run a SELECT. Caller owns the returned cursor."""
        self._check_open()
        cur = self._conn.cursor()
        try:
            cur.execute(sql, args)
        except Exception:
            cur.close()
            raise
        self._sink.info(TAG, _describe(sql, args))
        return ResultCursor(cur)

    def exec_sql(self, sql: str, *args: Any) -> None:
        """Run one statement and discard any result."""
        self._check_open()
        cur = self._conn.cursor()
        try:
            cur.execute(sql, args)
        finally:
            cur.close()
        self._sink.info(TAG, _describe(sql, args))

    def exec_script(self, script: str) -> None:
        """Run several statements at once (trigger bodies, seed scripts)."""
        self._check_open()
        cur = self._conn.cursor()
        try:
            cur.executescript(script)
        finally:
            cur.close()
        self._sink.info(TAG, script)

    def execute_update(self, sql: str, *args: Any) -> int:
        """Run UPDATE/DELETE. Returns affected row count."""
        self._check_open()
        cur = self._conn.cursor()
        try:
            cur.execute(sql, args)
            rows = cur.rowcount
        finally:
            cur.close()
        self._sink.info(TAG, _describe(sql, args))
        return rows

    def insert_and_get_id(self, sql: str, *args: Any) -> int:
        """
        Run an INSERT and return the generated row id.

        Returns:
            -1 if the statement wrote no row (e.g. OR IGNORE hit a conflict)
             0 if a row was written but no row id was generated
            otherwise the new row id
        """
        self._check_open()
        # last_insert_rowid() is connection-wide and untouched by WITHOUT ROWID tables
        before = self._last_insert_rowid()
        cur = self._conn.cursor()
        try:
            cur.execute(sql, args)
            if cur.rowcount <= 0:
                return NOT_EXECUTED
            self._sink.info(TAG, _describe(sql, args))
            row_id = cur.lastrowid
        finally:
            cur.close()
        if not row_id or row_id == before:
            return NO_GENERATED_ID
        return row_id

    def _last_insert_rowid(self) -> int:
        cur = self._conn.execute("SELECT last_insert_rowid()")
        try:
            return cur.fetchone()[0]
        finally:
            cur.close()
