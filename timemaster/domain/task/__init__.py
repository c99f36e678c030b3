"""Task domain - the task record and its lifecycle.

All exports are pure (no I/O, no side effects).

Key Types:
    Task - The task record (entity and persisted schema)
    TaskDraft - User-editable fields as supplied by a command
    TaskKind, TaskStatus, RepeatRule - Schema enums

Lifecycle Functions (module ``lifecycle``):
    create, edit, increase_progress, archive, reopen, derive_status

Errors:
    TaskError and its subclasses ValidationError, NotFound,
    ImmutableFieldError, IllegalTransitionError, StorageError

Domain Events:
    TaskCreated, TaskEdited, TaskProgressed, TaskCompleted,
    TaskArchived, TaskReopened, TaskDeleted
"""

from . import lifecycle
from .errors import (
    IllegalTransitionError,
    ImmutableFieldError,
    NotFound,
    StorageError,
    TaskError,
    ValidationError,
)
from .events import (
    DomainEvent,
    TaskArchived,
    TaskCompleted,
    TaskCreated,
    TaskDeleted,
    TaskEdited,
    TaskProgressed,
    TaskReopened,
)
from .models import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    RepeatRule,
    Task,
    TaskDraft,
    TaskKind,
    TaskStatus,
    utc_now,
)

__all__ = [
    # Models
    "Task",
    "TaskDraft",
    "TaskKind",
    "TaskStatus",
    "RepeatRule",
    "NAME_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "utc_now",
    # Lifecycle
    "lifecycle",
    # Errors
    "TaskError",
    "ValidationError",
    "NotFound",
    "ImmutableFieldError",
    "IllegalTransitionError",
    "StorageError",
    # Events
    "DomainEvent",
    "TaskCreated",
    "TaskEdited",
    "TaskProgressed",
    "TaskCompleted",
    "TaskArchived",
    "TaskReopened",
    "TaskDeleted",
]
