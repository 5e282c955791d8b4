# litehelper/core/constants.py
"""
Project-wide constants.
Do not import from db here: this is a leaf module.
"""

APP_NAME = "litehelper"
APP_VERSION = "0.1.0"

# Paths (relative to CWD unless overridden by LITEHELPER_DB_DIR)
DEFAULT_DB_FOLDER = "databases"

# Schema version record
SCHEMA_TABLE = "schema"
NO_SCHEMA_VERSION = 0

# Sentinels returned by the convenience layer
NOT_EXECUTED = -1   # statement ran but wrote nothing
NO_GENERATED_ID = 0  # row written, no row id produced

# Environment overrides
ENV_DB_DIR = "LITEHELPER_DB_DIR"
ENV_TRACE_SQL = "LITEHELPER_TRACE_SQL"
