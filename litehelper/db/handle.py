# litehelper/db/handle.py
"""
Handle: one open SQLite connection plus connection-scoped operations.

Two layers:
  - strict:      insert_with_on_conflict, update_with_on_conflict, delete,
                 query/exec_sql/execute_update: errors propagate.
  - convenience: insert, replace, update, upsert: sqlite3 errors are
                 logged through the sink and returned inside the result
                 (sentinel -1 / all-false), unless the handle is strict.

Column maps are iterated in insertion order so the generated column list
and the positional bind args always line up.

A closed handle is dead: every further operation raises HandleClosed.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Union

from litehelper.core.constants import NOT_EXECUTED
from litehelper.core.enums import ConflictAlgorithm
from litehelper.core.exceptions import TransactionError
from litehelper.db.executor import StatementExecutor
from litehelper.db.log import LogSink
from litehelper.db.query_builder import QueryBuilder
from litehelper.db.results import OperationResult, UpsertStatus

_log = logging.getLogger("litehelper.db.handle")

TAG = "Handle"

Conflict = Union[ConflictAlgorithm, str]


def _conflict_sql(conflict: Conflict) -> str:
    if isinstance(conflict, ConflictAlgorithm):
        return conflict.value
    return conflict.strip()


class Handle(StatementExecutor):
    """
    Open connection to one physical database.
    Owned by the OpenHelper that created it; callers borrow it.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        path: Optional[Path] = None,
        read_only: bool = False,
        sink: Optional[LogSink] = None,
        strict: bool = False,
    ) -> None:
        super().__init__(conn, sink)
        self._path = path
        self._read_only = read_only
        self._strict = strict
        self._close_lock = threading.Lock()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("read-only" if self._read_only else "writable")
        return f"<Handle {self._path} {state}>"

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def strict(self) -> bool:
        return self._strict

    def close(self) -> None:
        """Close the connection. Idempotent."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            try:
                if self._conn.in_transaction:
                    self._conn.rollback()
            finally:
                self._conn.close()
            _log.debug("handle closed: %s", self._path)

    def __enter__(self) -> "Handle":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def exec_script(self, script: str) -> None:
        # sqlite3 may COMMIT a pending transaction before running a script
        if self.in_transaction:
            raise TransactionError("exec_script is not allowed inside a transaction")
        super().exec_script(script)

    # ------------------------------------------------------------------
    # Strict column-map operations
    # ------------------------------------------------------------------

    def insert_with_on_conflict(
        self,
        table: str,
        values: Mapping[str, Any],
        conflict: Conflict = ConflictAlgorithm.NONE,
    ) -> int:
        """
        INSERT one row built from a column→value map.
        Returns the new row id, 0 if none was generated, -1 if nothing was written.
        """
        columns = list(values.keys())
        bind_args = [values[c] for c in columns]
        verb = "INSERT"
        clause = _conflict_sql(conflict)
        if clause:
            verb = f"INSERT {clause}"
        placeholders = ",".join("?" for _ in columns)
        sql = f"{verb} INTO {table}({','.join(columns)}) VALUES ({placeholders})"
        return self.insert_and_get_id(sql, *bind_args)

    def update_with_on_conflict(
        self,
        table: str,
        values: Mapping[str, Any],
        conflict: Conflict = ConflictAlgorithm.NONE,
        where: Optional[str] = None,
        *where_args: Any,
    ) -> int:
        """
        UPDATE rows from a column→value map. A missing where updates every row.
        Set args bind first, where args after. Returns affected rows.
        """
        columns = list(values.keys())
        bind_args = [values[c] for c in columns]
        bind_args.extend(where_args)
        verb = "UPDATE"
        clause = _conflict_sql(conflict)
        if clause:
            verb = f"UPDATE {clause}"
        sql = f"{verb} {table} SET {','.join(f'{c}=?' for c in columns)}"
        if where:
            sql += f" WHERE {where}"
        return self.execute_update(sql, *bind_args)

    def delete(self, table: str, where: Optional[str] = None, *where_args: Any) -> int:
        """DELETE rows. A missing where deletes every row. Returns affected rows."""
        sql = f"DELETE FROM {table}"
        if where:
            sql += f" WHERE {where}"
        return self.execute_update(sql, *where_args)

    # ------------------------------------------------------------------
    # Convenience layer
    # ------------------------------------------------------------------

    def insert(self, table: str, values: Mapping[str, Any]) -> OperationResult:
        try:
            return OperationResult(self.insert_with_on_conflict(table, values))
        except sqlite3.Error as exc:
            if self._strict:
                raise
            return self._swallow(f"Error inserting {dict(values)}", exc)

    def replace(self, table: str, values: Mapping[str, Any]) -> OperationResult:
        """
        INSERT OR REPLACE: on a UNIQUE/PRIMARY KEY conflict the existing row
        is deleted and the new one inserted.
        """
        try:
            return OperationResult(
                self.insert_with_on_conflict(table, values, ConflictAlgorithm.REPLACE)
            )
        except sqlite3.Error as exc:
            if self._strict:
                raise
            return self._swallow(f"Error replacing {dict(values)}", exc)

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: Optional[str] = None,
        *where_args: Any,
    ) -> OperationResult:
        try:
            return OperationResult(
                self.update_with_on_conflict(
                    table, values, ConflictAlgorithm.NONE, where, *where_args
                )
            )
        except sqlite3.Error as exc:
            if self._strict:
                raise
            return self._swallow(f"Error updating {dict(values)}", exc)

    def upsert(
        self,
        table: str,
        values: Mapping[str, Any],
        where: Optional[str] = None,
        *where_args: Any,
    ) -> UpsertStatus:
        """Update rows matching where; if none changed, INSERT OR IGNORE."""
        try:
            rows = self.update_with_on_conflict(
                table, values, ConflictAlgorithm.NONE, where, *where_args
            )
            if rows > 0:
                return UpsertStatus.for_update(rows)
            insert_id = self.insert_with_on_conflict(table, values, ConflictAlgorithm.IGNORE)
            if insert_id > NOT_EXECUTED:
                return UpsertStatus.for_insert(insert_id)
            return UpsertStatus.failed()
        except sqlite3.Error as exc:
            if self._strict:
                raise
            self._sink.error(TAG, f"Error upsert {dict(values)}", exc)
            return UpsertStatus.failed(exc)

    def _swallow(self, msg: str, exc: sqlite3.Error) -> OperationResult:
        self._sink.error(TAG, msg, exc)
        return OperationResult.failed(exc)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_long(self, column: str, table: str, where: Optional[str] = None, *args: Any) -> int:
        """First column of the first matching row as int, or -1 if no row."""
        sql = f"SELECT {column} FROM {table}"
        if where:
            sql += f" WHERE {where}"
        with self.query(sql, *args) as cur:
            row = cur.fetchone()
        if row is None or row[0] is None:
            return NOT_EXECUTED
        return int(row[0])

    def table(self, table: str) -> QueryBuilder:
        """Start a SELECT on table."""
        return QueryBuilder(self).from_(table)

    # ------------------------------------------------------------------
    # Transactions: explicit, not nested
    # ------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return not self._closed and self._conn.in_transaction

    def begin_transaction(self) -> None:
        self._check_open()
        if self._conn.in_transaction:
            raise TransactionError("transaction already active; nesting is not supported")
        self._conn.execute("BEGIN")

    def set_transaction_successful(self) -> None:
        """Commit the active transaction."""
        self._check_open()
        if not self._conn.in_transaction:
            raise TransactionError("no active transaction to commit")
        self._conn.execute("COMMIT")

    def rollback(self) -> None:
        self._check_open()
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def end_transaction(self) -> None:
        """Return to autocommit. Uncommitted work is rolled back."""
        if self._closed:
            return
        if self._conn.in_transaction:
            _log.debug("end_transaction with pending work, rolling back: %s", self._path)
            self._conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator["Handle"]:
        """Commit on success, roll back on error, always end."""
        self.begin_transaction()
        try:
            yield self
            self.set_transaction_successful()
        except BaseException:
            self.rollback()
            raise
        finally:
            self.end_transaction()

    # ------------------------------------------------------------------
    # Engine-level version counter (PRAGMA user_version)
    # ------------------------------------------------------------------

    def get_pragma_version(self) -> int:
        with self.query("PRAGMA user_version") as cur:
            return cur.fetchone()[0]

    def set_pragma_version(self, version: int) -> None:
        self.exec_sql(f"PRAGMA user_version = {int(version)}")
