"""
Embedded SQL engine boundary.

The handle only depends on the small capability set below, so any engine
(or a test double) exposing it can be injected:

    Engine.open(path)                      -> EngineConnection | OpenError
    EngineConnection.is_open()             -> bool
    EngineConnection.execute(sql, cb=None) -> StatusCode
    EngineConnection.changes()             -> int
    EngineConnection.error_message()       -> str
    EngineConnection.close()               -> None

SQLiteEngine implements it on top of the stdlib ``sqlite3`` driver.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Callable, Optional, Protocol, runtime_checkable

from plugin_db.db.errors import OpenError
from plugin_db.models.result import Row, StatusCode

logger = logging.getLogger(__name__)

RowCallback = Callable[[Row], None]

NO_ERROR = "not an error"


# ---------------------------------------------------------------------------
# Capability contract
# ---------------------------------------------------------------------------
@runtime_checkable
class EngineConnection(Protocol):
    def is_open(self) -> bool:
        ...

    def execute(self, sql: str, row_callback: Optional[RowCallback] = None) -> StatusCode:
        ...

    def changes(self) -> int:
        ...

    def error_message(self) -> str:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Engine(Protocol):
    def open(self, path: Path) -> EngineConnection:
        ...


# ---------------------------------------------------------------------------
# Statement splitting
# ---------------------------------------------------------------------------
_QUOTE_CLOSERS = {"'": "'", '"': '"', "`": "`", "[": "]"}


def split_statements(sql: str) -> list[str]:
    """Split SQL text into complete statements in a single pass.

    Semicolons inside literals, quoted identifiers, comments and trigger
    bodies do not split. A trailing statement without a semicolon is kept
    as-is.
    """
    statements: list[str] = []
    start = 0
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch in _QUOTE_CLOSERS:
            i = _skip_quoted(sql, i, _QUOTE_CLOSERS[ch])
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end + 1
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif ch == ";":
            i += 1
            # only a trigger body can leave this incomplete
            if sqlite3.complete_statement(sql[start:i]):
                _append_statement(statements, sql[start:i])
                start = i
        else:
            i += 1
    _append_statement(statements, sql[start:])
    return statements


def _skip_quoted(sql: str, i: int, closer: str) -> int:
    """Index just past the literal opened at ``i``; doubled quotes are escapes."""
    end = sql.find(closer, i + 1)
    while end != -1 and closer != "]" and sql.startswith(closer, end + 1):
        end = sql.find(closer, end + 2)
    return len(sql) if end == -1 else end + 1


def _append_statement(statements: list[str], text: str) -> None:
    text = text.strip()
    if text.rstrip(";").strip():
        statements.append(text)


# ---------------------------------------------------------------------------
# SQLite implementation
# ---------------------------------------------------------------------------
class SQLiteConnection:
    """A single ``sqlite3`` connection reporting status codes instead of raising."""

    def __init__(self, raw: sqlite3.Connection):
        self._raw: Optional[sqlite3.Connection] = raw
        self._error: Optional[str] = None

    def is_open(self) -> bool:
        return self._raw is not None

    def execute(self, sql: str, row_callback: Optional[RowCallback] = None) -> StatusCode:
        conn = self._require_open()
        self._error = None
        for statement in split_statements(sql):
            try:
                cursor = conn.execute(statement)
            except sqlite3.Error as e:
                return self._fail(e)
            try:
                for row in cursor:
                    if row_callback is not None:
                        row_callback(dict(row))
            except sqlite3.Error as e:
                return self._fail(e)
            finally:
                cursor.close()
        return StatusCode.OK

    def changes(self) -> int:
        conn = self._require_open()
        return int(conn.execute("SELECT changes()").fetchone()[0])

    def error_message(self) -> str:
        return self._error or NO_ERROR

    def close(self) -> None:
        if self._raw is not None:
            self._raw.close()
            self._raw = None

    # -- internal --------------------------------------------------------------

    def _require_open(self) -> sqlite3.Connection:
        if self._raw is None:
            raise RuntimeError("SQLite connection is closed")
        return self._raw

    def _fail(self, error: sqlite3.Error) -> StatusCode:
        self._error = str(error)
        return StatusCode.ERROR


class SQLiteEngine:
    """Opens autocommit ``sqlite3`` connections with name-addressable rows."""

    def open(self, path: Path) -> SQLiteConnection:
        try:
            raw = sqlite3.connect(str(path), isolation_level=None)
        except sqlite3.Error as e:
            raise OpenError(path, str(e)) from e
        raw.row_factory = sqlite3.Row
        logger.debug(f"Opened SQLite connection to {path}")
        return SQLiteConnection(raw)
