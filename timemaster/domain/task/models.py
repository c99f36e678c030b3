"""Task domain models.

Pure domain models for the task lifecycle. Uses Pydantic so the same
classes validate command payloads, serialize records for storage and
round-trip them back without loss.
"""

from collections.abc import Mapping, Sequence
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

NAME_MAX_LENGTH = 40
DESCRIPTION_MAX_LENGTH = 120


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class TaskKind(str, Enum):
    """What sort of task this is. Fixed at creation."""

    ONCE = "once"
    CYCLE = "cycle"
    LONG_TERM = "long_term"


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class RepeatRule(str, Enum):
    """Recurrence boundary of a cycle task."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _check_schedule(
    kind: TaskKind,
    repeat_rule: RepeatRule | None,
    start_date: date | None,
    end_date: date | None,
) -> None:
    if kind == TaskKind.CYCLE:
        if repeat_rule is None:
            raise ValueError("cycle task requires a repeat_rule")
    elif repeat_rule is not None:
        raise ValueError(f"repeat_rule is only allowed on cycle tasks, not {kind.value}")

    if kind == TaskKind.LONG_TERM:
        if start_date is None or end_date is None:
            raise ValueError("long term task requires start and end date")
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")
    elif start_date is not None or end_date is not None:
        raise ValueError(f"start_date/end_date are only allowed on long_term tasks, not {kind.value}")


class Task(BaseModel):
    """A trackable unit of work with a progress/target pair.

    This is both the domain entity and the persisted record: its field
    names and enum values are the on-disk schema. The validator rejects
    any combination that breaks the task invariants, so a Task that
    exists is always a legal one.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = ""
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    kind: TaskKind
    progress: int = Field(default=0, ge=0)
    target: int = Field(default=1, ge=1)
    repeat_rule: RepeatRule | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TaskStatus = TaskStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Task":
        if self.progress > self.target:
            raise ValueError(f"progress {self.progress} exceeds target {self.target}")
        _check_schedule(self.kind, self.repeat_rule, self.start_date, self.end_date)
        return self

    def is_complete(self) -> bool:
        """Check whether progress has reached the target."""
        return self.progress >= self.target

    def date_range(self) -> tuple[date, date] | None:
        """Return (start, end) for long-term tasks, None otherwise."""
        if self.start_date is None or self.end_date is None:
            return None
        return (self.start_date, self.end_date)


FIELD_ALIASES = {
    "type": "kind",
    "repeat": "repeat_rule",
    "repeatRule": "repeat_rule",
    "startDate": "start_date",
    "endDate": "end_date",
    "dateRange": "date_range",
}

SCHEDULE_FIELDS = ("repeat_rule", "start_date", "end_date", "date_range")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return isinstance(value, Sequence) and len(value) == 0


def canonical_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Rename front-end spellings to record field names.

    None values count as "not supplied" and are dropped, as are empty
    schedule values (``""``, ``[]``) which the edit form sends for kinds
    that have no schedule. A ``date_range`` pair is split into
    ``start_date``/``end_date`` and wins over either of those given
    separately.
    """
    fields: dict[str, Any] = {}
    for key, value in data.items():
        name = FIELD_ALIASES.get(key, key)
        if value is None or (name in SCHEDULE_FIELDS and _is_blank(value)):
            continue
        fields[name] = value

    if "date_range" in fields:
        pair = fields.pop("date_range")
        if isinstance(pair, str) or not isinstance(pair, Sequence) or len(pair) != 2:
            raise ValueError("date_range must be a [start, end] pair")
        for name, value in zip(("start_date", "end_date"), pair):
            if not _is_blank(value):
                fields[name] = value
    return fields


class TaskDraft(BaseModel):
    """The user-editable fields of a task, as supplied by a command.

    Accepts the field names of the record plus the spellings the front
    end sends (``type``, ``repeat``, ``repeatRule``, ``dateRange``).
    Fields that do not apply to the kind are dropped: the edit form
    reuses one object across kinds, so stale values are expected.
    Fields the kind requires must be present.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    id: str | None = None
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    kind: TaskKind
    target: int = Field(default=1, ge=1)
    progress: int | None = Field(default=None, ge=0)
    repeat_rule: RepeatRule | None = None
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="before")
    @classmethod
    def _canonicalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return canonical_fields(data)

    @model_validator(mode="after")
    def _normalize_schedule(self) -> "TaskDraft":
        if self.kind != TaskKind.CYCLE:
            self.repeat_rule = None
        if self.kind != TaskKind.LONG_TERM:
            self.start_date = None
            self.end_date = None
        _check_schedule(self.kind, self.repeat_rule, self.start_date, self.end_date)
        return self

    @classmethod
    def from_task(cls, task: Task) -> "TaskDraft":
        """Build a draft holding the editable fields of an existing task."""
        return cls.model_validate(
            {
                "name": task.name,
                "description": task.description,
                "kind": task.kind,
                "target": task.target,
                "repeat_rule": task.repeat_rule,
                "start_date": task.start_date,
                "end_date": task.end_date,
            }
        )

    def editable_fields(self) -> dict[str, Any]:
        """Fields an edit may overwrite on a stored task."""
        return {
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "target": self.target,
            "repeat_rule": self.repeat_rule,
            "start_date": self.start_date,
            "end_date": self.end_date,
        }
