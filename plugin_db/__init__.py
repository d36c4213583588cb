"""Lifecycle and safety layer around a plugin's SQLite database file."""

__version__ = "0.1.0"

from plugin_db.config import HandleConfig, config_for_plugin, get_handle_config
from plugin_db.db import (
    DatabaseHandle,
    OpenError,
    PluginDBError,
    StatementError,
    get_handle,
    new_handle,
    reset_handle,
)
from plugin_db.models import ExecutionResult, Row, StatusCode

__all__ = [
    "DatabaseHandle",
    "ExecutionResult",
    "HandleConfig",
    "OpenError",
    "PluginDBError",
    "Row",
    "StatementError",
    "StatusCode",
    "config_for_plugin",
    "get_handle",
    "get_handle_config",
    "new_handle",
    "reset_handle",
]
