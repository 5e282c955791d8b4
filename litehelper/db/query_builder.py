# litehelper/db/query_builder.py
"""
Fluent SELECT builder.

Builder methods mutate state and return the same builder. Compiling
(str(builder) / to_sql()) is pure: the same state always yields the same
SQL. A builder is owned by one thread and is never shared.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from litehelper.db.executor import ResultCursor, StatementExecutor


class QueryBuilder:

    def __init__(self, db: "StatementExecutor") -> None:
        self._db = db
        self._distinct = False
        self._columns: list[str] = []
        self._table: Optional[str] = None
        # dict keys keep insertion order and collapse duplicates
        self._joins: dict[str, None] = {}
        self._where: Optional[str] = None
        self._where_args: Optional[tuple] = None
        self._group_by: Optional[str] = None
        self._having: Optional[str] = None
        self._order_by: Optional[str] = None
        self._limit: Optional[str] = None

    def distinct(self) -> "QueryBuilder":
        """Force the query to return distinct rows."""
        self._distinct = True
        return self

    def select(self, *columns: str) -> "QueryBuilder":
        self._columns = list(columns)
        return self

    def from_(self, table: str) -> "QueryBuilder":
        self._table = table
        return self

    def join(self, table: str, condition: str, type: Optional[str] = None) -> "QueryBuilder":
        """
        Add a JOIN clause.

        table:     t2
        condition: t1.field = t2.field
        type:      LEFT, INNER, ... (optional)

        Adding an identical join twice has no further effect.
        """
        parts = []
        if type:
            parts.append(type)
        parts.append(f"JOIN {table.strip()} ON {condition.strip()}")
        self._joins[" ".join(parts)] = None
        return self

    def where(self, clause: str, *args: Any) -> "QueryBuilder":
        self._where = clause
        self._where_args = args if args else None
        return self

    def group_by(self, group_by: str) -> "QueryBuilder":
        self._group_by = group_by
        return self

    def having(self, having: str) -> "QueryBuilder":
        self._having = having
        return self

    def order_by(self, order_by: str) -> "QueryBuilder":
        self._order_by = order_by
        return self

    def limit(self, limit: Union[str, int]) -> "QueryBuilder":
        self._limit = str(limit)
        return self

    @property
    def args(self) -> tuple:
        """Positional args captured by where()."""
        return self._where_args or ()

    def get(self) -> "ResultCursor":
        """Compile and execute. Caller owns the returned cursor."""
        if self._where_args is not None:
            return self._db.query(self.to_sql(), *self._where_args)
        return self._db.query(self.to_sql())

    def to_sql(self) -> str:
        """Raises ValueError if from_() was never called."""
        if not self._table:
            raise ValueError("no table to select from; call from_() first")
        parts = ["SELECT "]
        if self._distinct:
            parts.append("DISTINCT ")
        parts.append(",".join(self._columns) if self._columns else "*")
        parts.append(" FROM ")
        parts.append(self._table)
        for join in self._joins:
            _append_clause(parts, " ", join)
        _append_clause(parts, " WHERE ", self._where)
        _append_clause(parts, " GROUP BY ", self._group_by)
        _append_clause(parts, " HAVING ", self._having)
        _append_clause(parts, " ORDER BY ", self._order_by)
        _append_clause(parts, " LIMIT ", self._limit)
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_sql()

    def __repr__(self) -> str:
        sql = self.to_sql() if self._table else None
        return f"QueryBuilder({sql!r}, args={list(self.args)!r})"


def _append_clause(parts: list[str], keyword: str, clause: Optional[str]) -> None:
    if clause:
        parts.append(keyword)
        parts.append(clause)
