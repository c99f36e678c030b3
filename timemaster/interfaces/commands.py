"""Command surface consumed by the presentation layer.

Each method takes the payload shape the front end sends (a dict, or one
of the request schemas) and returns the resulting Task. Failures are
raised as the typed errors in ``timemaster.domain.task.errors`` so the
caller can classify them; nothing is swallowed here.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from timemaster.application import ImportReport, TaskEngine, TaskStats
from timemaster.domain.shared import unwrap
from timemaster.domain.task import Task, TaskStatus, ValidationError
from timemaster.global_config import Settings, get_settings
from timemaster.infrastructure.storage import build_repository

logger = logging.getLogger(__name__)

Payload = Mapping[str, Any] | BaseModel


def _as_dict(payload: Payload) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_none=True)
    if isinstance(payload, Mapping):
        return dict(payload)
    raise ValidationError(f"Payload must be an object, got {type(payload).__name__}")


def _require_id(payload: Payload) -> str:
    task_id = _as_dict(payload).get("id")
    if not isinstance(task_id, str) or not task_id.strip():
        raise ValidationError("Payload requires a task id", ["id"])
    return task_id.strip()


class TaskCommands:
    """The operations the presentation layer may invoke.

    Example:
        commands = TaskCommands.from_settings()
        task = commands.create_task({"name": "Read", "kind": "once", "target": 3})
        commands.increase_task_progress({"id": task.id})
    """

    def __init__(self, engine: TaskEngine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TaskCommands":
        """Wire an engine to the repository the settings select."""
        settings = settings or get_settings()
        repository = build_repository(settings)
        commands = cls(TaskEngine(repository))
        if settings.seed_on_empty:
            unwrap(commands.engine.seed_defaults())
        logger.debug(f"Task commands ready backend={repository.backend}")
        return commands

    def list_tasks(self, status: TaskStatus | str | None = None) -> list[Task]:
        """All tasks, or those with ``status``; most recently touched first."""
        return unwrap(self.engine.list_tasks(status))

    def get_task(self, payload: Payload) -> Task:
        return unwrap(self.engine.get_task(_require_id(payload)))

    def create_task(self, payload: Payload) -> Task:
        return unwrap(self.engine.create_task(_as_dict(payload)))

    def update_task(self, payload: Payload) -> Task:
        fields = _as_dict(payload)
        return unwrap(self.engine.edit_task(_require_id(fields), fields))

    def delete_task(self, payload: Payload) -> None:
        unwrap(self.engine.delete_task(_require_id(payload)))

    def increase_task_progress(self, payload: Payload) -> Task:
        return unwrap(self.engine.increase_progress(_require_id(payload)))

    def archive_task(self, payload: Payload) -> Task:
        return unwrap(self.engine.archive_task(_require_id(payload)))

    def reopen_task(self, payload: Payload) -> Task:
        return unwrap(self.engine.reopen_task(_require_id(payload)))

    def task_stats(self) -> TaskStats:
        return unwrap(self.engine.get_stats())

    def import_tasks(self, payloads: Iterable[Payload]) -> ImportReport:
        """Best-effort bulk create. Entries that are not objects are reported, not raised."""
        return self.engine.import_tasks(
            p.model_dump(exclude_none=True) if isinstance(p, BaseModel) else p for p in payloads
        )

    def seed_defaults(self) -> list[Task]:
        return unwrap(self.engine.seed_defaults())
