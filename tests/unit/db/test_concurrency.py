# tests/unit/db/test_concurrency.py
import shutil
import tempfile
import threading
import time
import unittest
from pathlib import Path

from litehelper.core.enums import HelperState
from litehelper.db.open_helper import OpenHelper

_THREADS = 8


class SlowHelper(OpenHelper):

    def __init__(self, folder, version=1):
        super().__init__("shared.db", version, folder=folder)
        self.create_calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()
        self.release.set()

    def on_create(self, db):
        self.create_calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        time.sleep(0.05)
        db.exec_sql("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)")


class TestConcurrentAcquisition(unittest.TestCase):

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.helper = SlowHelper(self.tmp)

    def tearDown(self):
        self.helper.close()
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _run_threads(self, target):
        barrier = threading.Barrier(_THREADS)
        results = [None] * _THREADS
        errors = []

        def worker(i):
            try:
                barrier.wait(timeout=5)
                results[i] = target()
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(_THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
        self.assertEqual(errors, [])
        return results

    def test_single_open_and_migration(self):
        results = self._run_threads(self.helper.get_writable_database)
        first = results[0]
        self.assertIsNotNone(first)
        for db in results:
            self.assertIs(db, first)
        self.assertEqual(self.helper.open_count, 1)
        self.assertEqual(self.helper.create_calls, 1)

    def test_readers_see_migrated_schema(self):
        def read():
            db = self.helper.get_readable_database()
            # table exists only after on_create committed
            return db.get_long("COUNT(*)", "t")

        results = self._run_threads(read)
        self.assertEqual(results, [0] * _THREADS)
        self.assertEqual(self.helper.create_calls, 1)

    def test_close_waits_for_migration(self):
        self.helper.release.clear()
        acquired = []
        opener = threading.Thread(
            target=lambda: acquired.append(self.helper.get_writable_database())
        )
        opener.start()
        self.assertTrue(self.helper.entered.wait(timeout=5))

        closer = threading.Thread(target=self.helper.close)
        closer.start()
        closer.join(timeout=0.2)
        self.assertTrue(closer.is_alive())

        self.helper.release.set()
        opener.join(timeout=5)
        closer.join(timeout=5)
        self.assertFalse(closer.is_alive())
        self.assertEqual(len(acquired), 1)
        self.assertTrue(acquired[0].is_closed)
        self.assertEqual(self.helper.state, HelperState.CLOSED)

    def test_concurrent_writes_through_shared_handle(self):
        db = self.helper.get_writable_database()

        def write():
            return db.insert("t", {"v": threading.current_thread().name}).ok

        self.assertEqual(self._run_threads(write), [True] * _THREADS)
        self.assertEqual(db.get_long("COUNT(*)", "t"), _THREADS)


if __name__ == "__main__":
    unittest.main()
