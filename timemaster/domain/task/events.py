"""Task domain events.

Domain events are immutable records of a state change that a command
produced. The engine hands them to an optional listener and logs them.

All events are pure data structures - no I/O, no side effects.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from .models import TaskKind, TaskStatus


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Each event has a unique ID and timestamp.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    task_id: str

    model_config = {"frozen": True}


class TaskCreated(DomainEvent):
    """A new task was stored."""

    name: str
    kind: TaskKind
    status: TaskStatus


class TaskEdited(DomainEvent):
    """User-editable fields of a task changed."""

    changed_fields: list[str] = Field(default_factory=list)
    status: TaskStatus


class TaskProgressed(DomainEvent):
    """Progress moved one step without reaching the target."""

    progress: int
    target: int


class TaskCompleted(DomainEvent):
    """Progress reached the target and the task became completed."""

    progress: int
    target: int


class TaskArchived(DomainEvent):
    """The task was archived. ``previous_status`` records what it was."""

    previous_status: TaskStatus


class TaskReopened(DomainEvent):
    """An archived task became active again.

    ``cycle_reset`` is True when a cycle task's progress was zeroed to
    start a new recurrence.
    """

    cycle_reset: bool
    progress: int


class TaskDeleted(DomainEvent):
    """The task was removed from the store."""
