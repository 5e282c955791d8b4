# tests/unit/test_settings.py
import os
import unittest
from pathlib import Path
from unittest import mock

from litehelper.config import settings
from litehelper.db.log import default_sink


class TestSettings(unittest.TestCase):

    def test_default_folder(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(settings.database_folder(), Path("databases"))

    def test_folder_override(self):
        with mock.patch.dict(os.environ, {"LITEHELPER_DB_DIR": "/srv/data"}):
            self.assertEqual(settings.database_folder(), Path("/srv/data"))

    def test_trace_flag(self):
        for raw, expected in (("1", True), ("YES", True), ("on", True),
                              ("0", False), ("", False)):
            with mock.patch.dict(os.environ, {"LITEHELPER_TRACE_SQL": raw}):
                self.assertEqual(settings.trace_sql_enabled(), expected, raw)

    def test_unrecognised_trace_value(self):
        with mock.patch.dict(os.environ, {"LITEHELPER_TRACE_SQL": "maybe"}):
            with self.assertLogs("litehelper.config.settings", level="WARNING"):
                self.assertFalse(settings.trace_sql_enabled())

    def test_default_sink_follows_flag(self):
        with mock.patch.dict(os.environ, {"LITEHELPER_TRACE_SQL": "true"}):
            self.assertTrue(default_sink().enabled)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertFalse(default_sink().enabled)


if __name__ == "__main__":
    unittest.main()
