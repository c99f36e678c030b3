"""Request/Response schemas for the timemaster API.

Requests are deliberately loose: they check shapes only and leave the
task rules to the domain, so every rule violation comes back in the
same error format. Extra keys are kept because the front end also sends
``type``, ``repeat`` and ``dateRange``.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from timemaster.application import ImportFailure, ImportReport, TaskStats
from timemaster.domain.task import Task


# =============================================================================
# Task Schemas
# =============================================================================


class CreateTaskRequest(BaseModel):
    """Request to create a task."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = None
    target: Optional[int] = None
    progress: Optional[int] = None
    repeat_rule: Optional[str] = None
    date_range: Optional[list[date]] = None


class UpdateTaskRequest(BaseModel):
    """Request to edit a task. Omitted fields keep their value."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = None
    target: Optional[int] = None
    repeat_rule: Optional[str] = None
    date_range: Optional[list[date]] = None


class ImportTasksRequest(BaseModel):
    """Request to create many tasks at once."""

    tasks: list[CreateTaskRequest]


class ErrorResponse(BaseModel):
    """Body returned for every failed command."""

    error: str
    detail: str


__all__ = [
    "CreateTaskRequest",
    "UpdateTaskRequest",
    "ImportTasksRequest",
    "ErrorResponse",
    "Task",
    "TaskStats",
    "ImportReport",
    "ImportFailure",
]
