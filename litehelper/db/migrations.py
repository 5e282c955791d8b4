# litehelper/db/migrations.py
"""
Declarative schema migrations on top of OpenHelper.

Design:
- Each migration is a (version, description, statements) tuple where
  statements is a LIST of individual SQL strings: no splitting required.
- Migrations are append-only: never modify existing entries.
- Versions run 1..N without gaps; the target version is N.
- All pending migrations run inside the helper's single migration
  transaction, so a failure anywhere leaves the file at its old version.
- ALTER TABLE ... ADD COLUMN that hits an existing column is skipped, so a
  file that was hand-patched can still be brought up to date.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Sequence, Union

from litehelper.core.exceptions import MigrationFailed
from litehelper.db.handle import Handle
from litehelper.db.log import LogSink
from litehelper.db.open_helper import OpenHelper

_log = logging.getLogger("litehelper.db.migrations")

Migration = tuple[int, str, list[str]]


def validate_migrations(migrations: Sequence[Migration]) -> None:
    for i, (version, _, _) in enumerate(migrations):
        expected = i + 1
        if version != expected:
            raise ValueError(
                f"Migration list invalid: expected version {expected}, got {version}"
            )


def apply_migrations(
    db: Handle,
    migrations: Sequence[Migration],
    from_version: int,
    to_version: int,
    db_label: str = "db",
) -> int:
    """
    Run the statements of every migration with from_version < version <= to_version.
    Must be called inside an open transaction. Returns number applied.
    """
    applied = 0
    for version, description, statements in migrations:
        if version <= from_version or version > to_version:
            continue

        _log.info(f"[{db_label}] applying migration {version}: {description}")
        for sql in statements:
            sql = sql.strip()
            if not sql:
                continue
            if sql.upper().startswith("ALTER TABLE"):
                try:
                    db.exec_sql(sql)
                except sqlite3.OperationalError as e:
                    msg = str(e).lower()
                    if "duplicate column" in msg or "already exists" in msg:
                        _log.debug(f"[{db_label}] idempotent skip: {e}")
                    else:
                        raise
            else:
                # one statement per entry; trigger bodies included
                db.exec_sql(sql)
        applied += 1

    if applied == 0:
        _log.debug(f"[{db_label}] schema up to date at version {from_version}")
    return applied


class MigratingOpenHelper(OpenHelper):
    """
    OpenHelper driven by a migration list.
    on_create applies everything, on_upgrade applies the pending range.
    There is no down path: on_downgrade fails and the file is left untouched.
    """

    def __init__(
        self,
        name: str,
        migrations: Sequence[Migration],
        folder: Union[str, Path, None] = None,
        sink: Optional[LogSink] = None,
        strict: bool = False,
    ) -> None:
        validate_migrations(migrations)
        if not migrations:
            raise ValueError("migration list is empty")
        self._migrations = list(migrations)
        super().__init__(name, len(self._migrations), folder=folder, sink=sink, strict=strict)

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    def on_create(self, db: Handle) -> None:
        apply_migrations(db, self._migrations, 0, self.version, db_label=self.name)

    def on_upgrade(self, db: Handle, old_version: int, new_version: int) -> None:
        apply_migrations(db, self._migrations, old_version, new_version, db_label=self.name)

    def on_downgrade(self, db: Handle, old_version: int, new_version: int) -> None:
        raise MigrationFailed(
            self.name, old_version, new_version, "no downgrade path for declarative migrations"
        )
