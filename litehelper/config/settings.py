"""
Settings: environment-driven defaults.
Values are read at call time so tests can patch os.environ.
Per-instance settings are constructor arguments, never globals.
"""
import logging
import os
from pathlib import Path

from litehelper.core.constants import DEFAULT_DB_FOLDER, ENV_DB_DIR, ENV_TRACE_SQL

_log = logging.getLogger("litehelper.config.settings")

_TRUTHY = frozenset(("1", "true", "yes", "on"))


def database_folder() -> Path:
    """Default folder for database files. LITEHELPER_DB_DIR wins if set."""
    raw = os.environ.get(ENV_DB_DIR, "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path(DEFAULT_DB_FOLDER)


def trace_sql_enabled() -> bool:
    """Return True if statement tracing is switched on via LITEHELPER_TRACE_SQL."""
    raw = os.environ.get(ENV_TRACE_SQL, "").strip().lower()
    if raw and raw not in _TRUTHY and raw not in ("0", "false", "no", "off"):
        _log.warning("unrecognised %s value %r, tracing stays off", ENV_TRACE_SQL, raw)
    return raw in _TRUTHY
