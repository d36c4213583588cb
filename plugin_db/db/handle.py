"""Handle owning the connection to one SQLite file, with checked execution and maintenance."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from plugin_db.config import HandleConfig
from plugin_db.db.engine import Engine, EngineConnection, RowCallback, SQLiteEngine
from plugin_db.db.errors import StatementError
from plugin_db.models.result import ACCEPTABLE_STATUSES, ExecutionResult, Row
from plugin_db.utils.redact import redact_sql

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


class DatabaseHandle:
    """
    Owns the single connection to one plugin database file.

    The connection is opened lazily by any operation that needs it and
    foreign keys are switched on after every fresh open.

    Usage:
        handle = DatabaseHandle(HandleConfig(directory=Path("worlds"), name="main.db"))
        handle.execute("CREATE TABLE IF NOT EXISTS test(id INTEGER);")
        handle.execute("INSERT INTO test VALUES (1);")
        rows = handle.select("SELECT * FROM test;")
        handle.backup()
        handle.close()
    """

    def __init__(self, config: HandleConfig, engine: Optional[Engine] = None):
        self._config = config
        self._engine: Engine = engine or SQLiteEngine()
        self._conn: Optional[EngineConnection] = None

    # -- attributes ------------------------------------------------------------

    @property
    def directory(self) -> Path:
        return self._config.directory

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def path(self) -> Path:
        return self._config.path

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + BACKUP_SUFFIX)

    @property
    def is_open(self) -> bool:
        return self._conn is not None and self._conn.is_open()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"DatabaseHandle(path={str(self.path)!r}, {state})"

    # -- connection lifecycle --------------------------------------------------

    def open(self) -> None:
        """Open the database file unless a live connection already exists."""
        if self.is_open:
            return
        self._conn = self._engine.open(self.path)
        logger.debug(f"Opened database {self.path}")
        try:
            self.execute("PRAGMA foreign_keys=ON;")
        except StatementError:
            # A connection without foreign keys must not be reused.
            self.close()
            raise

    def close(self) -> None:
        if self._conn is not None and self._conn.is_open():
            self._conn.close()
            logger.debug(f"Closed database {self.path}")
        self._conn = None

    def __enter__(self) -> DatabaseHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # -- statements ------------------------------------------------------------

    def execute(
        self,
        sql: str,
        check_result: bool = True,
        row_callback: Optional[RowCallback] = None,
    ) -> ExecutionResult:
        """Run ``sql``, rolling back and raising StatementError on failure.

        Pass ``check_result=False`` to get the raw status back instead;
        neither the check nor the rollback happens then.
        """
        conn = self._connection()
        logger.debug(f"Executing: {redact_sql(sql)}")
        status = conn.execute(sql, row_callback)
        message: Optional[str] = None

        if status not in ACCEPTABLE_STATUSES:
            # Read before ROLLBACK replaces the engine's last error.
            message = conn.error_message()
            if check_result:
                conn.execute("ROLLBACK;")
                logger.warning(f"Statement failed and was rolled back: {message} [{redact_sql(sql)}]")
                raise StatementError(message, sql=sql)

        return ExecutionResult(status=status, changes=conn.changes(), message=message)

    def changes(self) -> int:
        return self._connection().changes()

    def select(self, sql: str) -> list[Row]:
        """Run a query and return every row, or raise without exposing any."""
        conn = self._connection()
        rows: list[Row] = []
        status = conn.execute(sql, rows.append)
        if status not in ACCEPTABLE_STATUSES:
            message = conn.error_message()
            logger.warning(f"Query failed: {message} [{redact_sql(sql)}]")
            raise StatementError(message, sql=sql)
        return rows

    # -- maintenance -----------------------------------------------------------

    def size(self) -> float:
        """Size of the database file in KB, read straight from the filesystem."""
        with open(self.path, "rb") as fh:
            size_bytes = fh.seek(0, os.SEEK_END)
        return size_bytes / 1024

    def vacuum(self) -> float:
        """VACUUM the database and return the number of KB recovered.

        The result is negative when the file grew.
        """
        size_before = self.size()
        self.execute("VACUUM;")
        size_after = self.size()
        recovered = size_before - size_after
        logger.info(f"Vacuumed {self.path}: {size_before:.1f} KB -> {size_after:.1f} KB")
        return recovered

    def integrity_check(self) -> bool:
        try:
            result = self.select("PRAGMA integrity_check;")
        except StatementError as e:
            logger.warning(f"Integrity check could not run on {self.path}: {e.message}")
            return False
        passed = len(result) == 1 and result[0].get("integrity_check") == "ok"
        if not passed:
            logger.warning(f"Integrity check failed on {self.path}: {len(result)} problem row(s)")
        return passed

    def backup(self) -> bool:
        """Copy the database file to ``<path>.backup`` if it passes an integrity check.

        A copy failure propagates and leaves the handle closed.
        """
        if not self.integrity_check():
            logger.warning(f"Refusing to back up {self.path}: integrity check failed")
            return False

        self.close()
        try:
            with open(self.path, "rb") as original, open(self.backup_path, "wb") as backup:
                shutil.copyfileobj(original, backup)
        except OSError as e:
            logger.warning(
                f"Backup of {self.path} failed: {e}; handle left closed, call open() to reconnect"
            )
            raise

        self.open()
        logger.info(f"Backed up {self.path} to {self.backup_path}")
        return True

    # -- internal --------------------------------------------------------------

    def _connection(self) -> EngineConnection:
        self.open()
        assert self._conn is not None
        return self._conn
