# litehelper/db/results.py
"""
Result types for the convenience layer.
All fields are immutable after construction (frozen dataclasses).
A failed operation carries the sentinel value AND the error, so callers
choose whether to propagate or ignore.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from litehelper.core.constants import NOT_EXECUTED


@dataclass(frozen=True)
class OperationResult:
    """Outcome of insert/replace/update. value is -1 on failure."""
    value: int
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> int:
        """Re-raise the swallowed error, else return value."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def failed(cls, error: BaseException) -> "OperationResult":
        return cls(NOT_EXECUTED, error)


@dataclass(frozen=True)
class UpsertStatus:
    """
    Outcome of Handle.upsert.
    created : no row matched and a new row was inserted
    updated : at least one existing row was changed
    A failed upsert is all-false with -1 counters.
    """
    created: bool
    updated: bool
    rows_changed: int = NOT_EXECUTED
    insert_id: int = NOT_EXECUTED
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.created or self.updated)

    @classmethod
    def for_update(cls, rows_changed: int) -> "UpsertStatus":
        return cls(False, True, rows_changed=rows_changed)

    @classmethod
    def for_insert(cls, insert_id: int) -> "UpsertStatus":
        return cls(True, False, insert_id=insert_id)

    @classmethod
    def failed(cls, error: Optional[BaseException] = None) -> "UpsertStatus":
        return cls(False, False, error=error)
