"""Typed failures for task commands.

Every failure the core can report is one of the classes below. Domain and
storage code returns them inside ``Err``; the command surface raises them.
Each class carries a stable ``code`` used on the wire.
"""

from pydantic import ValidationError as PydanticValidationError


class TaskError(Exception):
    """Base class for all task command failures."""

    code = "task_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Serialize for transport to the presentation layer."""
        return {"error": self.code, "detail": self.message}


class ValidationError(TaskError):
    """Malformed or missing fields on create or edit."""

    code = "validation_error"

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Collapse a pydantic error report into a single ValidationError."""
        fields: list[str] = []
        problems: list[str] = []
        for item in exc.errors():
            loc = ".".join(str(part) for part in item.get("loc", ()))
            if loc and loc not in fields:
                fields.append(loc)
            msg = item.get("msg", "invalid value")
            problems.append(f"{loc}: {msg}" if loc else msg)
        return cls("; ".join(problems) or "invalid task", fields)


class NotFound(TaskError):
    """The command references an id that is not in the store."""

    code = "not_found"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ImmutableFieldError(TaskError):
    """An edit tried to change ``kind`` or ``id``."""

    code = "immutable_field"

    def __init__(self, field: str) -> None:
        super().__init__(f"Field '{field}' cannot be changed after creation")
        self.field = field


class IllegalTransitionError(TaskError):
    """The command is not allowed from the task's current status."""

    code = "illegal_transition"


class StorageError(TaskError):
    """The persistence medium failed (unavailable, corrupt, full)."""

    code = "storage_error"
