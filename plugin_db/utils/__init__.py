"""Small helpers shared by the database layer."""

from plugin_db.utils.redact import redact_sql

__all__ = ["redact_sql"]
