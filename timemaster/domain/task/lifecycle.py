"""Task lifecycle transitions.

Each command is a pure function from the current record (and the command's
arguments) to the next record plus the domain event describing the change.
Nothing here loads or saves; the engine in ``timemaster.application`` does
that around these functions.

State machine:

    active --increase (progress reaches target)--> completed
    active | completed --archive--> archived
    archived --reopen--> active   (cycle tasks restart at progress 0)

``completed`` is never set directly. It is derived from progress and
target whenever either of them changes.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from timemaster.domain.shared import Err, Ok, Result

from .errors import (
    IllegalTransitionError,
    ImmutableFieldError,
    TaskError,
    ValidationError,
)
from .events import (
    TaskArchived,
    TaskCompleted,
    TaskCreated,
    TaskEdited,
    TaskProgressed,
    TaskReopened,
)
from .models import Task, TaskDraft, TaskKind, TaskStatus, canonical_fields

# Fields only the engine may write.
READ_ONLY_FIELDS = ("status", "created_at", "updated_at")


def new_task_id() -> str:
    """Generate a fresh task identifier."""
    return str(uuid4())


def derive_status(current: TaskStatus, progress: int, target: int) -> TaskStatus:
    """Compute the status implied by progress, keeping archived tasks archived."""
    if current == TaskStatus.ARCHIVED:
        return TaskStatus.ARCHIVED
    if progress >= target:
        return TaskStatus.COMPLETED
    return TaskStatus.ACTIVE


def _canonical(fields: Mapping[str, Any]) -> Result[dict[str, Any], TaskError]:
    try:
        return Ok(canonical_fields(fields))
    except ValueError as e:
        return Err(ValidationError(str(e), ["date_range"]))


def _draft(fields: Mapping[str, Any]) -> Result[TaskDraft, TaskError]:
    try:
        return Ok(TaskDraft.model_validate(dict(fields)))
    except PydanticValidationError as e:
        return Err(ValidationError.from_pydantic(e))


def _build(data: Mapping[str, Any]) -> Result[Task, TaskError]:
    try:
        return Ok(Task.model_validate(dict(data)))
    except PydanticValidationError as e:
        return Err(ValidationError.from_pydantic(e))


def _reject_read_only(fields: Mapping[str, Any], read_only: tuple[str, ...]) -> TaskError | None:
    for key in read_only:
        if key in fields:
            return ValidationError(f"'{key}' cannot be set by a command", [key])
    return None


def create(
    fields: Mapping[str, Any],
    *,
    now: datetime,
) -> Result[tuple[Task, TaskCreated], TaskError]:
    """Build a new task from a create payload.

    The task starts active with progress 0, or with the supplied initial
    progress clamped to the target. If that already reaches the target
    the task starts completed.

    Args:
        fields: Create payload (name, description, kind, target, and the
            kind-specific repeat_rule or date range; optional id/progress).
        now: Timestamp for created_at and updated_at.

    Returns:
        Ok((task, TaskCreated)) on success, or
        Err(ValidationError) if the payload is malformed.
    """
    canonical = _canonical(fields)
    if isinstance(canonical, Err):
        return canonical
    rejected = _reject_read_only(canonical.value, READ_ONLY_FIELDS)
    if rejected is not None:
        return Err(rejected)

    draft_result = _draft(canonical.value)
    if isinstance(draft_result, Err):
        return draft_result
    draft = draft_result.value

    progress = min(draft.progress or 0, draft.target)
    status = derive_status(TaskStatus.ACTIVE, progress, draft.target)

    built = _build(
        {
            **draft.editable_fields(),
            "id": draft.id or new_task_id(),
            "progress": progress,
            "status": status,
            "created_at": now,
            "updated_at": now,
        }
    )
    if isinstance(built, Err):
        return built
    task = built.value

    event = TaskCreated(task_id=task.id, name=task.name, kind=task.kind, status=task.status)
    return Ok((task, event))


def edit(
    task: Task,
    fields: Mapping[str, Any],
    *,
    now: datetime,
) -> Result[tuple[Task, TaskEdited], TaskError]:
    """Apply an edit payload to a task.

    Omitted (or None) fields keep their stored value. If the new target is
    below the current progress, progress is clamped to it. Status is then
    re-derived, except that an archived task stays archived.

    Args:
        task: The stored task.
        fields: Edit payload.
        now: Timestamp for updated_at.

    Returns:
        Ok((updated_task, TaskEdited)) on success,
        Err(ImmutableFieldError) if the payload changes kind or id,
        Err(ValidationError) if it sets progress/status/timestamps or the
        resulting fields are invalid.
    """
    canonical = _canonical(fields)
    if isinstance(canonical, Err):
        return canonical
    provided = canonical.value

    rejected = _reject_read_only(provided, READ_ONLY_FIELDS + ("progress",))
    if rejected is not None:
        return Err(rejected)

    if "id" in provided and str(provided.pop("id")).strip() != task.id:
        return Err(ImmutableFieldError("id"))

    if "kind" in provided:
        raw_kind = provided.pop("kind")
        try:
            kind = TaskKind(raw_kind)
        except ValueError:
            return Err(ValidationError(f"unknown kind: {raw_kind}", ["kind"]))
        if kind != task.kind:
            return Err(ImmutableFieldError("kind"))

    merged = TaskDraft.from_task(task).model_dump(exclude_none=True)
    merged.update(provided)
    draft_result = _draft(merged)
    if isinstance(draft_result, Err):
        return draft_result
    editable = draft_result.value.editable_fields()

    progress = min(task.progress, editable["target"])
    status = derive_status(task.status, progress, editable["target"])

    changed = [key for key, value in editable.items() if getattr(task, key) != value]
    if progress != task.progress:
        changed.append("progress")
    if status != task.status:
        changed.append("status")

    built = _build(
        {
            **task.model_dump(),
            **editable,
            "progress": progress,
            "status": status,
            "updated_at": now,
        }
    )
    if isinstance(built, Err):
        return built
    updated = built.value

    return Ok((updated, TaskEdited(task_id=task.id, changed_fields=changed, status=status)))


def increase_progress(
    task: Task,
    *,
    now: datetime,
) -> Result[tuple[Task, TaskProgressed | TaskCompleted | None], TaskError]:
    """Advance progress by one step, capped at the target.

    Once progress equals the target and the status already says so, the
    command changes nothing: the same task comes back with no event and
    updated_at untouched. A new cycle is started with reopen, not here.

    Returns:
        Ok((task, event_or_None)) on success, or
        Err(IllegalTransitionError) if the task is archived.
    """
    if task.status == TaskStatus.ARCHIVED:
        return Err(IllegalTransitionError("cannot update archived task"))

    progress = min(task.progress + 1, task.target)
    status = derive_status(task.status, progress, task.target)
    if progress == task.progress and status == task.status:
        return Ok((task, None))

    updated = task.model_copy(update={"progress": progress, "status": status, "updated_at": now})

    event: TaskProgressed | TaskCompleted
    if status == TaskStatus.COMPLETED:
        event = TaskCompleted(task_id=task.id, progress=progress, target=task.target)
    else:
        event = TaskProgressed(task_id=task.id, progress=progress, target=task.target)
    return Ok((updated, event))


def archive(task: Task, *, now: datetime) -> Result[tuple[Task, TaskArchived], TaskError]:
    """Archive a task, keeping its progress exactly as it is."""
    if task.status == TaskStatus.ARCHIVED:
        return Err(IllegalTransitionError(f"Task '{task.name}' is already archived"))

    updated = task.model_copy(update={"status": TaskStatus.ARCHIVED, "updated_at": now})
    return Ok((updated, TaskArchived(task_id=task.id, previous_status=task.status)))


def reopen(task: Task, *, now: datetime) -> Result[tuple[Task, TaskReopened], TaskError]:
    """Bring an archived task back to active.

    A cycle task starts a fresh recurrence at progress 0. Once and
    long-term tasks resume with the progress they had.
    """
    if task.status != TaskStatus.ARCHIVED:
        return Err(
            IllegalTransitionError(
                f"Task '{task.name}' cannot be reopened "
                f"(current status: {task.status.value})"
            )
        )

    cycle_reset = task.kind == TaskKind.CYCLE
    progress = 0 if cycle_reset else task.progress
    updated = task.model_copy(
        update={"status": TaskStatus.ACTIVE, "progress": progress, "updated_at": now}
    )
    event = TaskReopened(task_id=task.id, cycle_reset=cycle_reset, progress=progress)
    return Ok((updated, event))
