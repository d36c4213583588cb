"""Unit tests for the SQLite engine boundary and SQL redaction helper."""

from __future__ import annotations

import shutil
import tempfile
import time
import unittest
from pathlib import Path

from plugin_db.db.engine import (
    NO_ERROR,
    Engine,
    EngineConnection,
    SQLiteEngine,
    split_statements,
)
from plugin_db.db.errors import OpenError
from plugin_db.models.result import ExecutionResult, StatusCode
from plugin_db.utils.redact import redact_sql


# ===========================================================================
# 1. Statement splitting (pure functions)
# ===========================================================================

class TestSplitStatements(unittest.TestCase):
    def test_single_statement(self):
        self.assertEqual(split_statements("SELECT 1;"), ["SELECT 1;"])

    def test_trailing_statement_without_semicolon(self):
        self.assertEqual(
            split_statements("CREATE TABLE a (x); SELECT * FROM a"),
            ["CREATE TABLE a (x);", "SELECT * FROM a"],
        )

    def test_semicolon_inside_literal(self):
        statements = split_statements("INSERT INTO a VALUES ('x;y'); SELECT 1;")
        self.assertEqual(statements, ["INSERT INTO a VALUES ('x;y');", "SELECT 1;"])

    def test_trigger_body_stays_whole(self):
        sql = (
            "CREATE TRIGGER tr AFTER INSERT ON a BEGIN "
            "INSERT INTO b VALUES (1); UPDATE b SET x = 2; END; SELECT 1;"
        )
        statements = split_statements(sql)
        self.assertEqual(len(statements), 2)
        self.assertTrue(statements[0].endswith("END;"))

    def test_blank_and_empty_statements_dropped(self):
        self.assertEqual(split_statements(""), [])
        self.assertEqual(split_statements("  ;  ; "), [])

    def test_semicolons_in_comments_and_identifiers(self):
        sql = (
            "SELECT 1; -- trailing; comment\n"
            "SELECT \"a;b\", [c;d] FROM t /* x; y */; SELECT 2;"
        )
        self.assertEqual(
            split_statements(sql),
            [
                "SELECT 1;",
                "-- trailing; comment\nSELECT \"a;b\", [c;d] FROM t /* x; y */;",
                "SELECT 2;",
            ],
        )

    def test_escaped_quote_does_not_end_literal(self):
        statements = split_statements("INSERT INTO a VALUES ('it''s; fine'); SELECT 1;")
        self.assertEqual(statements, ["INSERT INTO a VALUES ('it''s; fine');", "SELECT 1;"])

    def test_large_literal_full_of_semicolons_splits_in_linear_time(self):
        literal = "a;" * 80000
        sql = "INSERT INTO t VALUES ('" + literal + "'); SELECT 1;"
        started = time.perf_counter()
        statements = split_statements(sql)
        elapsed = time.perf_counter() - started
        self.assertEqual(len(statements), 2)
        self.assertIn(literal, statements[0])
        self.assertLess(elapsed, 1.0)


# ===========================================================================
# 2. SQLite connection
# ===========================================================================

class TestSQLiteEngine(unittest.TestCase):
    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp(prefix="plugin_db_"))
        self.conn = SQLiteEngine().open(self.tmp / "engine.db")

    def tearDown(self):
        self.conn.close()
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_satisfies_protocols(self):
        self.assertIsInstance(SQLiteEngine(), Engine)
        self.assertIsInstance(self.conn, EngineConnection)

    def test_success_reports_ok(self):
        self.assertEqual(self.conn.execute("CREATE TABLE a (x INTEGER);"), StatusCode.OK)
        self.assertEqual(self.conn.error_message(), NO_ERROR)

    def test_error_reports_status_and_message(self):
        status = self.conn.execute("SELECT * FROM missing;")
        self.assertEqual(status, StatusCode.ERROR)
        self.assertIn("no such table", self.conn.error_message())

    def test_error_cleared_by_next_statement(self):
        self.conn.execute("SELECT * FROM missing;")
        self.conn.execute("SELECT 1;")
        self.assertEqual(self.conn.error_message(), NO_ERROR)

    def test_rows_are_dicts(self):
        self.conn.execute("CREATE TABLE a (x INTEGER, y TEXT);")
        self.conn.execute("INSERT INTO a VALUES (1, 'one');")
        rows = []
        self.conn.execute("SELECT x, y FROM a;", rows.append)
        self.assertEqual(rows, [{"x": 1, "y": "one"}])

    def test_autocommit_rollback_without_transaction_is_an_error(self):
        self.assertEqual(self.conn.execute("ROLLBACK;"), StatusCode.ERROR)
        self.assertIn("no transaction is active", self.conn.error_message())

    def test_changes(self):
        self.conn.execute("CREATE TABLE a (x INTEGER);")
        self.conn.execute("INSERT INTO a VALUES (1), (2);")
        self.assertEqual(self.conn.changes(), 2)

    def test_close(self):
        self.assertTrue(self.conn.is_open())
        self.conn.close()
        self.conn.close()
        self.assertFalse(self.conn.is_open())
        with self.assertRaises(RuntimeError):
            self.conn.execute("SELECT 1;")

    def test_open_failure_raises_open_error(self):
        with self.assertRaises(OpenError) as ctx:
            SQLiteEngine().open(self.tmp / "missing" / "engine.db")
        self.assertIn("unable to open", ctx.exception.message)


# ===========================================================================
# 3. Result model
# ===========================================================================

class TestExecutionResult(unittest.TestCase):
    def test_ok_statuses(self):
        for status in (StatusCode.OK, StatusCode.ROW, StatusCode.DONE):
            self.assertTrue(ExecutionResult(status=status).ok)
        self.assertFalse(ExecutionResult(status=StatusCode.ERROR, message="boom").ok)


# ===========================================================================
# 4. Redaction
# ===========================================================================

class TestRedactSQL(unittest.TestCase):
    def test_string_and_blob_literals(self):
        self.assertEqual(
            redact_sql("INSERT INTO t VALUES ('secret', x'ABCD', 3)"),
            "INSERT INTO t VALUES (?, ?, 3)",
        )

    def test_escaped_quotes(self):
        self.assertEqual(redact_sql("SELECT 'it''s';"), "SELECT ?;")

    def test_whitespace_collapsed(self):
        self.assertEqual(redact_sql("SELECT *\n   FROM t\n"), "SELECT * FROM t")

    def test_long_statement_truncated(self):
        text = redact_sql("SELECT " + ", ".join(f"col{i}" for i in range(100)) + " FROM t")
        self.assertEqual(len(text), 120)
        self.assertTrue(text.endswith("..."))


if __name__ == "__main__":
    unittest.main()
