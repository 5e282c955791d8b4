# litehelper/db/open_helper.py
"""
OpenHelper: owns the lifecycle of one database handle.

One instance per database identity (folder + name). The handle is opened
lazily on first request, reconciled against the target schema version,
cached, and handed out to every caller until closed.

Acquisition (always under the instance lock):
  1. a cached handle that was closed is discarded
  2. a cached open handle is returned as-is if it satisfies the request
  3. re-entry from a hook is rejected (ReentrantAcquisition)
  4. a cached read-only handle is reopened writable when writable is asked for
  5. otherwise a new connection is opened; a failed read-only open falls
     back to a writable open so a first-ever read can create the file
  6. on_configure
  7. version reconciliation inside one transaction:
       stored == 0       -> on_create
       stored >  target  -> on_downgrade(stored, target)
       stored <  target  -> on_upgrade(stored, target)
     the new version is written in the same transaction; any hook error
     rolls back and leaves the stored version and the cache untouched
  8. on_open
  9. cache and return

Lifecycle: IDLE -> OPENING -> (MIGRATING) -> OPEN -> CLOSED.
OPENING/MIGRATING are only ever observed by the thread holding the lock.
"""
from __future__ import annotations

import abc
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from litehelper.config import settings
from litehelper.core.enums import HelperState
from litehelper.core.exceptions import (
    ClosedDuringInitialization,
    HelperStateError,
    MigrationFailed,
    ReadOnlyUpgradeRejected,
    ReentrantAcquisition,
    StorageUnavailable,
)
from litehelper.db.connection import get_schema_version, open_database, set_schema_version
from litehelper.db.handle import Handle
from litehelper.db.log import LogSink, default_sink
from litehelper.utils.paths import resolve_database_path

_log = logging.getLogger("litehelper.db.open_helper")

_BUSY_STATES = (HelperState.OPENING, HelperState.MIGRATING)


class OpenHelper(abc.ABC):
    """
    Subclass and implement on_create; override the other hooks as needed.
    Every hook receives the in-progress handle. Hooks run inside the
    acquisition critical section and must not request a handle themselves.
    """

    def __init__(
        self,
        name: str,
        version: int,
        folder: Union[str, Path, None] = None,
        sink: Optional[LogSink] = None,
        strict: bool = False,
    ) -> None:
        if version < 1:
            raise ValueError(f"version must be >= 1, was {version}")
        self._name = name
        self._new_version = version
        self._folder = Path(folder) if folder is not None else settings.database_folder()
        self._sink = sink or default_sink()
        self._strict = strict

        self._lock = threading.RLock()
        self._database: Optional[Handle] = None
        self._state = HelperState.IDLE
        self._open_count = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name} v{self._new_version} {self._state.value}>"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> int:
        return self._new_version

    @property
    def database_folder(self) -> Path:
        return self._folder

    @property
    def database_path(self) -> Path:
        return resolve_database_path(self._folder, self._name)

    @property
    def state(self) -> HelperState:
        return self._state

    @property
    def open_count(self) -> int:
        """Number of physical opens performed so far."""
        return self._open_count

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    def get_writable_database(self) -> Handle:
        with self._lock:
            return self._get_database_locked(writable=True)

    def get_readable_database(self) -> Handle:
        """
        Return a handle for reading. If the file cannot be opened read-only
        (e.g. it does not exist yet) a writable handle is returned instead.
        """
        with self._lock:
            return self._get_database_locked(writable=False)

    def _get_database_locked(self, writable: bool) -> Handle:
        db = self._database
        if db is not None:
            if db.is_closed:
                # closed behind our back by a caller; treat as absent
                self._database = None
                db = None
            elif not writable or not db.is_read_only:
                return db

        if self._state in _BUSY_STATES:
            raise ReentrantAcquisition()

        previous = self._state
        try:
            self._state = HelperState.OPENING
            path = self.database_path
            if db is not None:
                if writable and db.is_read_only:
                    db = self._reopen_read_write(path, db)
            else:
                try:
                    db = self._open(path, writable)
                except StorageUnavailable:
                    if writable:
                        raise
                    _log.info("read-only open failed, reopening writable: %s", path)
                    db = self._open(path, True)

            self.on_configure(db)

            version = get_schema_version(db)
            if version != self._new_version:
                if db.is_read_only:
                    raise ReadOnlyUpgradeRejected(self._name, version, self._new_version)
                self._state = HelperState.MIGRATING
                self._migrate(db, version)

            self.on_open(db)

            if db.is_read_only:
                _log.info("opened %s in read-only mode", self._name)

            self._database = db
            self._state = HelperState.OPEN
            return db
        finally:
            if self._state is not HelperState.OPEN:
                self._state = (
                    HelperState.CLOSED if previous is HelperState.CLOSED else HelperState.IDLE
                )
            if db is not None and db is not self._database:
                db.close()

    def _open(self, path: Path, writable: bool) -> Handle:
        self._open_count += 1
        return open_database(path, writable, sink=self._sink, strict=self._strict)

    def _reopen_read_write(self, path: Path, db: Handle) -> Handle:
        if not db.is_read_only:
            return db
        db.close()
        self._database = None
        _log.debug("reopening %s read-write", self._name)
        return self._open(path, True)

    def _migrate(self, db: Handle, version: int) -> None:
        target = self._new_version
        db.begin_transaction()
        try:
            if version == 0:
                self.on_create(db)
            elif version > target:
                self.on_downgrade(db, version, target)
            else:
                self.on_upgrade(db, version, target)
            if not db.in_transaction:
                raise MigrationFailed(
                    self._name, version, target, "hook ended the migration transaction"
                )
            set_schema_version(db, target)
            db.set_transaction_successful()
        except BaseException as exc:
            # a closed handle already rolled back
            if not db.is_closed:
                db.rollback()
            if isinstance(exc, (HelperStateError, MigrationFailed)) or not isinstance(exc, Exception):
                raise
            _log.warning("%s: migration %d -> %d rolled back: %s", self._name, version, target, exc)
            raise MigrationFailed(self._name, version, target, str(exc)) from exc
        finally:
            db.end_transaction()
        _log.info("%s: schema version %d -> %d", self._name, version, target)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the cached handle, if any. Safe to call twice."""
        with self._lock:
            if self._state in _BUSY_STATES:
                raise ClosedDuringInitialization()
            db, self._database = self._database, None
            self._state = HelperState.CLOSED
            if db is None or db.is_closed:
                return
            try:
                db.close()
            except sqlite3.Error as exc:
                _log.warning("error closing %s: %s", self._name, exc)
            else:
                _log.info("%s closed", self._name)

    def __enter__(self) -> "OpenHelper":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def on_configure(self, db: Handle) -> None:
        """Pragmas, foreign keys, ... Runs before the version is read."""

    @abc.abstractmethod
    def on_create(self, db: Handle) -> None:
        """Create the schema of an empty database."""

    def on_upgrade(self, db: Handle, old_version: int, new_version: int) -> None:
        pass

    def on_downgrade(self, db: Handle, old_version: int, new_version: int) -> None:
        pass

    def on_open(self, db: Handle) -> None:
        """Runs after the schema is at the target version."""
