"""Exceptions raised by the database handle and engine boundary."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class PluginDBError(RuntimeError):
    """Base class for database handle failures."""


class OpenError(PluginDBError):
    """The engine could not open (or create) the database file."""

    def __init__(self, path: Path | str, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"Failed to open database {self.path}: {message}")


class StatementError(PluginDBError):
    """A checked statement (or a select) returned a disallowed status.

    For checked execution the rollback has already been attempted by the
    time this is raised.
    """

    def __init__(self, message: str, sql: Optional[str] = None):
        self.message = message
        self.sql = sql
        super().__init__(message)
