# litehelper: SQLite open helper
# Public API lives in litehelper.db.
from litehelper.core.constants import APP_VERSION as __version__

__all__ = ["__version__"]
