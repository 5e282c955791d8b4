# litehelper/core/enums.py
"""
Canonical enums for the entire package.
"""
from enum import Enum


class HelperState(str, Enum):
    """Lifecycle of one OpenHelper instance."""
    IDLE = "idle"
    OPENING = "opening"
    MIGRATING = "migrating"
    OPEN = "open"
    CLOSED = "closed"


class ConflictAlgorithm(str, Enum):
    """SQLite ON CONFLICT clause used by INSERT/UPDATE."""
    NONE = ""
    ROLLBACK = "OR ROLLBACK"
    ABORT = "OR ABORT"
    FAIL = "OR FAIL"
    IGNORE = "OR IGNORE"
    REPLACE = "OR REPLACE"
