# litehelper/core/exceptions.py
"""
All custom exceptions for litehelper.
Granular exception types allow precise error handling and logging.
Messages carry stable keywords so callers and tests can match on them.
"""
from __future__ import annotations


class LiteHelperError(Exception):
    """Base exception for all litehelper errors."""


# --- Paths ---

class InvalidDatabaseName(LiteHelperError, ValueError):
    """Database name escapes its folder. Must contain 'invalid database name'."""
    def __init__(self, name: str):
        super().__init__(f"invalid database name: {name!r}")


# --- DB ---

class DatabaseError(LiteHelperError):
    """Base for database errors."""


class StorageUnavailable(DatabaseError):
    """The physical database could not be opened or created."""
    def __init__(self, path, cause: BaseException | None = None):
        self.path = path
        msg = f"cannot open database: {path}"
        if cause is not None:
            msg = f"{msg} ({cause})"
        super().__init__(msg)


class HandleClosed(DatabaseError):
    """Operation attempted on a closed handle. Must contain 'closed'."""
    def __init__(self, msg="handle is closed; request a fresh one"):
        super().__init__(msg)


class TransactionError(DatabaseError):
    """Transaction control misuse (nesting, commit outside a transaction)."""


class ReadOnlyUpgradeRejected(DatabaseError):
    """Schema version mismatch on a read-only handle. Must contain 'read-only'."""
    def __init__(self, name: str, old_version: int, new_version: int):
        self.old_version = old_version
        self.new_version = new_version
        super().__init__(
            f"can't upgrade read-only database from version "
            f"{old_version} to {new_version}: {name}"
        )


class MigrationFailed(DatabaseError):
    """A create/upgrade/downgrade hook raised. Transaction was rolled back."""
    def __init__(self, name: str, old_version: int, new_version: int, reason: str = ""):
        self.old_version = old_version
        self.new_version = new_version
        msg = f"migration of {name} from version {old_version} to {new_version} failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


# --- Helper lifecycle ---

class HelperStateError(DatabaseError):
    """Base for lifecycle misuse of an OpenHelper."""


class ReentrantAcquisition(HelperStateError):
    """Acquisition re-entered from a hook. Must contain 'recursively'."""
    def __init__(self, msg="get_database called recursively"):
        super().__init__(msg)


class ClosedDuringInitialization(HelperStateError):
    """close() while a migration is in flight. Must contain 'initialization'."""
    def __init__(self, msg="closed during initialization"):
        super().__init__(msg)
