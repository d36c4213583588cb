"""
Central configuration loader.
Reads from environment variables (via .env); resolves where a plugin's
database file lives. The handle itself never reads the environment: it is
given an already-resolved HandleConfig.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Load .env from repo root (if present)
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env")

DEFAULT_NAME = "main"
DB_SUFFIX = ".db"


def _get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    val = os.getenv(key, default)
    if required and not val:
        raise EnvironmentError(f"Missing required environment variable: {key}")
    return val


# ---------------------------------------------------------------------------
# Database handle config
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class HandleConfig:
    directory: Path
    name: str

    def __post_init__(self) -> None:
        if not self.name or self.name in (".", ".."):
            raise ValueError(f"Invalid database file name: {self.name!r}")
        if "/" in self.name or os.sep in self.name:
            raise ValueError(f"Database file name must not contain a path separator: {self.name!r}")
        object.__setattr__(self, "directory", Path(self.directory))

    @property
    def path(self) -> Path:
        return self.directory / self.name


def get_handle_config() -> HandleConfig:
    return HandleConfig(
        directory=Path(_get("PLUGIN_DB_DIR", default=os.getcwd())),  # type: ignore[arg-type]
        name=_get("PLUGIN_DB_NAME", default=DEFAULT_NAME + DB_SUFFIX),  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# Host plugin defaults
# ---------------------------------------------------------------------------
def config_for_plugin(
    plugin_directory: Optional[Path | str],
    plugin_name: Optional[str],
    fallback_directory: Path | str,
) -> HandleConfig:
    """Resolve the default location for a plugin's database.

    ``<plugin_directory>/<plugin_name>.db`` when the host knows the plugin,
    otherwise ``<fallback_directory>/main.db`` (the world directory when
    running from the main script file).
    """
    directory = Path(plugin_directory) if plugin_directory else Path(fallback_directory)
    name = (plugin_name or DEFAULT_NAME).lower() + DB_SUFFIX
    return HandleConfig(directory=directory, name=name)
