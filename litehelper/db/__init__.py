# litehelper/db: SQLite handle lifecycle
# One OpenHelper per database file owns one cached Handle.
# Schema version is reconciled through transactional hooks on first access.
from litehelper.db.connection import apply_pragmas, get_schema_version, open_database, set_schema_version
from litehelper.db.handle import Handle
from litehelper.db.log import LogSink, default_sink
from litehelper.db.migrations import MigratingOpenHelper, apply_migrations, validate_migrations
from litehelper.db.open_helper import OpenHelper
from litehelper.db.query_builder import QueryBuilder
from litehelper.db.registry import clear_helpers, get_helper, release_helper
from litehelper.db.results import OperationResult, UpsertStatus

__all__ = [
    "Handle",
    "LogSink",
    "MigratingOpenHelper",
    "OpenHelper",
    "OperationResult",
    "QueryBuilder",
    "UpsertStatus",
    "apply_migrations",
    "apply_pragmas",
    "clear_helpers",
    "default_sink",
    "get_helper",
    "get_schema_version",
    "open_database",
    "release_helper",
    "set_schema_version",
    "validate_migrations",
]
