"""Domain models for the plugin database handle."""

from plugin_db.models.result import ACCEPTABLE_STATUSES, ExecutionResult, Row, StatusCode

__all__ = [
    "ACCEPTABLE_STATUSES",
    "ExecutionResult",
    "Row",
    "StatusCode",
]
