# tests/unit/db/test_query_builder.py
import unittest

from litehelper.db.query_builder import QueryBuilder


class _RecordingExecutor:
    """Stands in for a Handle; records what get() asks it to run."""

    def __init__(self):
        self.calls = []

    def query(self, sql, *args):
        self.calls.append((sql, args))
        return "cursor"


class TestCompile(unittest.TestCase):

    def test_full_select(self):
        q = QueryBuilder(None).select("a", "b").from_("t").where("id=?", 5).order_by("a").limit("10")
        self.assertEqual(str(q), "SELECT a,b FROM t WHERE id=? ORDER BY a LIMIT 10")

    def test_compile_is_idempotent(self):
        q = QueryBuilder(None).select("a").from_("t").where("a > ?", 1)
        self.assertEqual(q.to_sql(), q.to_sql())
        self.assertEqual(str(q), q.to_sql())

    def test_no_columns_selects_star(self):
        self.assertEqual(str(QueryBuilder(None).from_("t")), "SELECT * FROM t")

    def test_distinct(self):
        q = QueryBuilder(None).distinct().select("name").from_("t")
        self.assertEqual(str(q), "SELECT DISTINCT name FROM t")

    def test_group_by_having(self):
        q = QueryBuilder(None).select("k", "COUNT(*)").from_("t").group_by("k").having("COUNT(*) > 1")
        self.assertEqual(str(q), "SELECT k,COUNT(*) FROM t GROUP BY k HAVING COUNT(*) > 1")

    def test_empty_clauses_skipped(self):
        q = QueryBuilder(None).from_("t").where("").order_by("").limit("")
        self.assertEqual(str(q), "SELECT * FROM t")

    def test_int_limit(self):
        self.assertEqual(str(QueryBuilder(None).from_("t").limit(5)), "SELECT * FROM t LIMIT 5")

    def test_join_types_and_trim(self):
        q = (QueryBuilder(None).select("t.id").from_("t")
             .join(" u ", " t.uid = u.id ", "LEFT")
             .join("v", "v.id = t.vid"))
        self.assertEqual(
            str(q),
            "SELECT t.id FROM t LEFT JOIN u ON t.uid = u.id JOIN v ON v.id = t.vid",
        )

    def test_duplicate_join_collapsed(self):
        q = QueryBuilder(None).from_("t").join("u", "t.uid = u.id").join("u", "t.uid = u.id")
        self.assertEqual(str(q), "SELECT * FROM t JOIN u ON t.uid = u.id")

    def test_join_keeps_insertion_order(self):
        q = (QueryBuilder(None).from_("t")
             .join("b", "b.id = t.bid")
             .join("a", "a.id = t.aid")
             .join("b", "b.id = t.bid"))
        self.assertEqual(
            str(q), "SELECT * FROM t JOIN b ON b.id = t.bid JOIN a ON a.id = t.aid"
        )

    def test_clause_order(self):
        q = (QueryBuilder(None).from_("t").limit(1).order_by("a").having("x").group_by("g")
             .where("w"))
        self.assertEqual(
            str(q), "SELECT * FROM t WHERE w GROUP BY g HAVING x ORDER BY a LIMIT 1"
        )

    def test_select_replaces_columns(self):
        q = QueryBuilder(None).select("a").select("b", "c").from_("t")
        self.assertEqual(str(q), "SELECT b,c FROM t")

    def test_missing_table_rejected(self):
        q = QueryBuilder(None).select("a").where("a = ?", 1)
        with self.assertRaises(ValueError):
            q.to_sql()
        with self.assertRaises(ValueError):
            str(q)
        self.assertIn("None", repr(q))


class TestGet(unittest.TestCase):

    def test_get_binds_where_args(self):
        db = _RecordingExecutor()
        result = QueryBuilder(db).from_("t").where("id=? AND k=?", 5, "x").get()
        self.assertEqual(result, "cursor")
        self.assertEqual(db.calls, [("SELECT * FROM t WHERE id=? AND k=?", (5, "x"))])

    def test_get_without_table_runs_nothing(self):
        db = _RecordingExecutor()
        with self.assertRaises(ValueError):
            QueryBuilder(db).select("a").get()
        self.assertEqual(db.calls, [])

    def test_get_without_args(self):
        db = _RecordingExecutor()
        QueryBuilder(db).from_("t").where("id IS NULL").get()
        self.assertEqual(db.calls, [("SELECT * FROM t WHERE id IS NULL", ())])

    def test_args_property(self):
        q = QueryBuilder(None).from_("t").where("a=?", 1)
        self.assertEqual(q.args, (1,))
        self.assertEqual(QueryBuilder(None).from_("t").args, ())


if __name__ == "__main__":
    unittest.main()
