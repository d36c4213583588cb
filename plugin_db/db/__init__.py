"""Database layer — a single lazily-opened SQLite handle with checked execution."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from plugin_db.config import HandleConfig, get_handle_config
from plugin_db.db.engine import Engine, EngineConnection, SQLiteEngine
from plugin_db.db.errors import OpenError, PluginDBError, StatementError
from plugin_db.db.handle import DatabaseHandle


def new_handle(
    config: Optional[HandleConfig] = None,
    *,
    directory: Optional[Path | str] = None,
    name: Optional[str] = None,
    engine: Optional[Engine] = None,
) -> DatabaseHandle:
    """Build a handle from a config, or from ``directory``/``name`` overrides.

    Missing values fall back to ``get_handle_config()``. Nothing is opened.
    """
    if config is None:
        defaults = get_handle_config()
        config = HandleConfig(
            directory=Path(directory) if directory is not None else defaults.directory,
            name=name if name is not None else defaults.name,
        )
    elif directory is not None or name is not None:
        raise ValueError("Pass either a HandleConfig or directory/name, not both")
    return DatabaseHandle(config, engine=engine)


# -- module singleton ----------------------------------------------------------

_default_handle: Optional[DatabaseHandle] = None


def get_handle(config: Optional[HandleConfig] = None) -> DatabaseHandle:
    """Return (and lazily create) the module-level DatabaseHandle."""
    global _default_handle
    if _default_handle is None:
        _default_handle = new_handle(config)
    return _default_handle


def reset_handle() -> None:
    """Close and discard the module-level handle (useful in tests)."""
    global _default_handle
    if _default_handle is not None:
        _default_handle.close()
        _default_handle = None


__all__ = [
    "DatabaseHandle",
    "Engine",
    "EngineConnection",
    "OpenError",
    "PluginDBError",
    "SQLiteEngine",
    "StatementError",
    "get_handle",
    "new_handle",
    "reset_handle",
]
