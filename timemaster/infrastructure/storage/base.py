"""Task store interface and helpers shared by its implementations.

A store is a durable keyed collection of Task records. It is the only
component allowed to do I/O. Every method returns a Result: expected
failures come back as ``Err(TaskError)``, never as exceptions.
"""

import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from timemaster.domain.shared import Err, Ok, Result
from timemaster.domain.task import (
    StorageError,
    Task,
    TaskError,
    TaskStatus,
    ValidationError,
)
from timemaster.domain.task.lifecycle import new_task_id

# Ids double as file names in the JSON store, so keep them to a safe alphabet.
TASK_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


class TaskRepository:
    """Pluggable task store interface.

    Implementations provide CRUD on Task records plus listing ordered by
    most recent activity. Ids are never reused: a deleted id is
    remembered and a later create with it is rejected.
    """

    backend = "abstract"

    def create(self, task: Task) -> Result[str, TaskError]:  # pragma: no cover - interface only
        """Persist a new record, assigning an id if it has none. Returns the id."""
        raise NotImplementedError

    def get(self, task_id: str) -> Result[Task, TaskError]:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_all(
        self, status: TaskStatus | None = None
    ) -> Result[list[Task], TaskError]:  # pragma: no cover - interface only
        """All tasks (or those with ``status``), most recently updated first."""
        raise NotImplementedError

    def update(self, task: Task) -> Result[Task, TaskError]:  # pragma: no cover - interface only
        """Replace the record with the same id. Err(NotFound) if there is none."""
        raise NotImplementedError

    def delete(self, task_id: str) -> Result[None, TaskError]:  # pragma: no cover - interface only
        """Remove a record. A second delete of the same id is Err(NotFound)."""
        raise NotImplementedError

    def count(self) -> Result[int, TaskError]:  # pragma: no cover - interface only
        """Number of stored records."""
        raise NotImplementedError

    def close(self) -> None:
        """Release resources. Most stores hold none between calls."""
        return


def is_valid_task_id(task_id: str) -> bool:
    """Check whether an id uses the allowed alphabet."""
    return bool(TASK_ID_PATTERN.match(task_id))


def prepare_for_create(task: Task) -> Result[Task, TaskError]:
    """Assign an id if missing and re-check the record against the schema.

    Records can be produced with ``model_copy``, which skips validation,
    so the store validates once more before anything reaches the medium.
    """
    task_id = task.id or new_task_id()
    if not is_valid_task_id(task_id):
        return Err(ValidationError(f"Invalid task id: {task_id!r}", ["id"]))
    checked = record_to_task({**task_to_record(task), "id": task_id})
    if isinstance(checked, Err):
        return checked
    return Ok(checked.value)


def task_to_record(task: Task) -> dict[str, Any]:
    """Serialize a task to its on-disk form."""
    return task.model_dump(mode="json")


def record_to_task(record: dict[str, Any]) -> Result[Task, TaskError]:
    """Deserialize a stored record, reporting schema violations as StorageError."""
    try:
        return Ok(Task.model_validate(record))
    except PydanticValidationError as e:
        problem = ValidationError.from_pydantic(e)
        return Err(StorageError(f"Invalid task record {record.get('id', '?')}: {problem.message}"))


def describe_count(counted: Result[int, TaskError]) -> str:
    """Render a count() result for log lines."""
    return str(counted.value) if isinstance(counted, Ok) else "unknown"


def sort_recent(tasks: list[Task]) -> list[Task]:
    """Order by updated_at descending; ties by created_at, then id."""
    return sorted(tasks, key=lambda t: (t.updated_at, t.created_at, t.id), reverse=True)
