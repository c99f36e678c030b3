"""Application service layer for timemaster.

This package contains the task lifecycle engine, which orchestrates the
pure domain transitions around a task repository.

Example usage:
    >>> from timemaster.application import TaskEngine
    >>> from timemaster.infrastructure.storage import InMemoryTaskRepository
    >>> from timemaster.domain.shared import is_ok
    >>>
    >>> engine = TaskEngine(InMemoryTaskRepository())
    >>> result = engine.create_task({"name": "Stretch", "kind": "once"})
    >>> is_ok(result)
    True
"""

from timemaster.application.locks import KeyedLock, MonotonicClock
from timemaster.application.task_service import (
    ImportFailure,
    ImportReport,
    TaskEngine,
    TaskStats,
    parse_status,
)

__all__ = [
    "TaskEngine",
    "TaskStats",
    "ImportReport",
    "ImportFailure",
    "KeyedLock",
    "MonotonicClock",
    "parse_status",
]
