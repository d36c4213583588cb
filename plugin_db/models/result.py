"""Execution result model — status codes and rows returned by the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


Row = dict[str, Any]


class StatusCode(str, Enum):
    OK = "ok"
    ROW = "row"
    DONE = "done"
    ERROR = "error"


ACCEPTABLE_STATUSES = frozenset({StatusCode.OK, StatusCode.ROW, StatusCode.DONE})


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a single ``execute`` call against the database."""

    status: StatusCode
    changes: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in ACCEPTABLE_STATUSES
