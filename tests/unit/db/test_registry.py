# tests/unit/db/test_registry.py
import shutil
import tempfile
import unittest
from pathlib import Path

from litehelper.db.migrations import MigratingOpenHelper
from litehelper.db.open_helper import OpenHelper
from litehelper.db.registry import clear_helpers, get_helper, release_helper


class PlainHelper(OpenHelper):

    def __init__(self, name, version, folder=None):
        super().__init__(name, version, folder=folder)

    def on_create(self, db):
        db.exec_sql("CREATE TABLE t (id INTEGER)")


class TestRegistry(unittest.TestCase):

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())

    def tearDown(self):
        clear_helpers()
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_one_helper_per_identity(self):
        a = get_helper(PlainHelper, self.tmp, "app.db", 1)
        b = get_helper(PlainHelper, str(self.tmp), "app.db", 1)
        c = get_helper(PlainHelper, self.tmp / "sub" / "..", "app.db", 1)
        self.assertIs(a, b)
        self.assertIs(a, c)

    def test_distinct_names(self):
        a = get_helper(PlainHelper, self.tmp, "a.db", 1)
        b = get_helper(PlainHelper, self.tmp, "b.db", 1)
        self.assertIsNot(a, b)

    def test_type_mismatch(self):
        get_helper(PlainHelper, self.tmp, "app.db", 1)
        with self.assertRaises(TypeError):
            get_helper(MigratingOpenHelper, self.tmp, "app.db", [(1, "x", ["SELECT 1"])])

    def test_release_closes(self):
        helper = get_helper(PlainHelper, self.tmp, "app.db", 1)
        db = helper.get_writable_database()
        release_helper(self.tmp, "app.db")
        self.assertTrue(db.is_closed)
        self.assertIsNot(get_helper(PlainHelper, self.tmp, "app.db", 1), helper)

    def test_clear_closes_all(self):
        dbs = [get_helper(PlainHelper, self.tmp, n, 1).get_writable_database()
               for n in ("a.db", "b.db")]
        clear_helpers()
        self.assertTrue(all(db.is_closed for db in dbs))


if __name__ == "__main__":
    unittest.main()
