"""Task application service.

The task lifecycle engine: for every command it takes the task's lock,
loads the record from the repository, runs the pure transition from
``timemaster.domain.task.lifecycle``, persists the result and hands the
domain event to the listener. It contains no presentation concerns and
leaves all I/O to the repository.

A failed command changes nothing: the record is only written after the
transition succeeded, and a failed write leaves the previous record in
place.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

from timemaster.application.locks import KeyedLock, MonotonicClock
from timemaster.application.seeds import SAMPLE_TASKS
from timemaster.domain.shared import Err, Ok, Result
from timemaster.domain.task import (
    DomainEvent,
    Task,
    TaskDeleted,
    TaskError,
    TaskStatus,
    ValidationError,
    lifecycle,
)
from timemaster.infrastructure.storage.base import TaskRepository

logger = logging.getLogger(__name__)

Transition = Callable[[Task, datetime], Result[tuple[Task, DomainEvent | None], TaskError]]
EventListener = Callable[[DomainEvent], None]


class TaskStats(BaseModel):
    """Counts of tasks per status for dashboard display.

    The completion rate only considers visible (non-archived) tasks.
    """

    active: int = 0
    completed: int = 0
    archived: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return self.active + self.completed + self.archived

    @computed_field
    @property
    def completion_rate(self) -> int:
        """Percentage of visible tasks that are completed, rounded."""
        visible = self.active + self.completed
        if visible == 0:
            return 0
        return round(self.completed / visible * 100)


class ImportFailure(BaseModel):
    """One payload that could not be imported."""

    index: int
    error: str
    detail: str


class ImportReport(BaseModel):
    """Outcome of a bulk import."""

    created: list[Task] = Field(default_factory=list)
    failed: list[ImportFailure] = Field(default_factory=list)


def parse_status(status: TaskStatus | str | None) -> Result[TaskStatus | None, TaskError]:
    """Turn a status filter from the outside world into a TaskStatus."""
    if status is None or isinstance(status, TaskStatus):
        return Ok(status)
    try:
        return Ok(TaskStatus(status))
    except ValueError:
        return Err(ValidationError(f"Unknown status: {status}", ["status"]))


class TaskEngine:
    """Enacts task commands against a repository.

    Mutating commands on the same id are serialized; commands on
    different ids run in parallel. Reads take no lock.

    Example:
        engine = TaskEngine(InMemoryTaskRepository())
        result = engine.create_task({"name": "Read", "kind": "once", "target": 3})
        if isinstance(result, Ok):
            engine.increase_progress(result.value.id)
    """

    def __init__(
        self,
        repository: TaskRepository,
        *,
        clock: MonotonicClock | None = None,
        on_event: EventListener | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or MonotonicClock()
        self._locks = KeyedLock()
        self._on_event = on_event

    @property
    def repository(self) -> TaskRepository:
        return self._repository

    # ---- internals ----

    def _emit(self, event: DomainEvent) -> None:
        logger.info(f"{type(event).__name__} task={event.task_id}")
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            # The command is already persisted at this point.
            logger.exception(f"Event listener failed for {type(event).__name__}")

    def _apply(self, task_id: str, command: str, transition: Transition) -> Result[Task, TaskError]:
        with self._locks.hold(task_id):
            loaded = self._repository.get(task_id)
            if isinstance(loaded, Err):
                logger.debug(f"{command} rejected for {task_id}: {loaded.error}")
                return loaded
            task = loaded.value

            result = transition(task, self._clock.now(after=task.updated_at))
            if isinstance(result, Err):
                logger.debug(f"{command} rejected for {task_id}: {result.error}")
                return result
            updated, event = result.value
            if event is None:
                return Ok(task)

            saved = self._repository.update(updated)
            if isinstance(saved, Err):
                return saved

        self._emit(event)
        return Ok(saved.value)

    # ---- queries ----

    def list_tasks(self, status: TaskStatus | str | None = None) -> Result[list[Task], TaskError]:
        """List tasks, most recently updated first, optionally by status."""
        parsed = parse_status(status)
        if isinstance(parsed, Err):
            return parsed
        return self._repository.list_all(parsed.value)

    def get_task(self, task_id: str) -> Result[Task, TaskError]:
        return self._repository.get(task_id)

    def get_stats(self) -> Result[TaskStats, TaskError]:
        """Count tasks per status."""
        listed = self._repository.list_all()
        if isinstance(listed, Err):
            return listed
        stats = TaskStats()
        for task in listed.value:
            if task.status == TaskStatus.ACTIVE:
                stats.active += 1
            elif task.status == TaskStatus.COMPLETED:
                stats.completed += 1
            else:
                stats.archived += 1
        return Ok(stats)

    # ---- commands ----

    def create_task(self, fields: Mapping[str, Any]) -> Result[Task, TaskError]:
        """Create a task from a create payload and store it."""
        result = lifecycle.create(fields, now=self._clock.now())
        if isinstance(result, Err):
            logger.debug(f"create rejected: {result.error}")
            return result
        task, event = result.value

        with self._locks.hold(task.id):
            stored = self._repository.create(task)
            if isinstance(stored, Err):
                return stored

        self._emit(event)
        return Ok(task)

    def edit_task(self, task_id: str, fields: Mapping[str, Any]) -> Result[Task, TaskError]:
        """Apply an edit payload. Omitted fields keep their value."""
        return self._apply(task_id, "edit", lambda task, now: lifecycle.edit(task, fields, now=now))

    def increase_progress(self, task_id: str) -> Result[Task, TaskError]:
        """Advance progress by one, completing the task at its target."""
        return self._apply(
            task_id, "increase_progress", lambda task, now: lifecycle.increase_progress(task, now=now)
        )

    def archive_task(self, task_id: str) -> Result[Task, TaskError]:
        return self._apply(task_id, "archive", lambda task, now: lifecycle.archive(task, now=now))

    def reopen_task(self, task_id: str) -> Result[Task, TaskError]:
        """Reopen an archived task; cycle tasks restart at progress 0."""
        return self._apply(task_id, "reopen", lambda task, now: lifecycle.reopen(task, now=now))

    def delete_task(self, task_id: str) -> Result[None, TaskError]:
        """Remove a task for good. Archive is the reversible alternative."""
        with self._locks.hold(task_id):
            removed = self._repository.delete(task_id)
            if isinstance(removed, Err):
                logger.debug(f"delete rejected for {task_id}: {removed.error}")
                return removed

        self._emit(TaskDeleted(task_id=task_id))
        return Ok(None)

    # ---- bulk ----

    def import_tasks(self, payloads: Iterable[Any]) -> ImportReport:
        """Create each payload independently; one failure does not stop the rest."""
        report = ImportReport()
        for index, payload in enumerate(payloads):
            if not isinstance(payload, Mapping):
                detail = f"Entry must be an object, got {type(payload).__name__}"
                logger.warning(f"Failed to import task #{index}: {detail}")
                report.failed.append(
                    ImportFailure(index=index, error=ValidationError.code, detail=detail)
                )
                continue
            result = self.create_task(payload)
            if isinstance(result, Ok):
                report.created.append(result.value)
                continue
            error = result.error
            logger.warning(f"Failed to import task #{index}: {error}")
            report.failed.append(ImportFailure(index=index, error=error.code, detail=error.message))
        return report

    def seed_defaults(self) -> Result[list[Task], TaskError]:
        """Create the sample tasks if the store is empty."""
        listed = self._repository.list_all()
        if isinstance(listed, Err):
            return listed
        if listed.value:
            return Ok([])

        report = self.import_tasks(SAMPLE_TASKS)
        if report.failed:
            first = report.failed[0]
            return Err(ValidationError(f"Sample task #{first.index} rejected: {first.detail}"))
        logger.info(f"Seeded {len(report.created)} sample tasks")
        return Ok(report.created)
