from pathlib import Path

import pytest

from timemaster.domain.task import (
    IllegalTransitionError,
    ImmutableFieldError,
    NotFound,
    RepeatRule,
    TaskKind,
    TaskStatus,
    ValidationError,
)
from timemaster.global_config import Settings, StoreBackend
from timemaster.interfaces.api.schemas import CreateTaskRequest
from timemaster.interfaces.commands import TaskCommands


def test_front_end_payload_shapes(commands: TaskCommands) -> None:
    task = commands.create_task(
        {
            "name": "English study plan",
            "type": "long_term",
            "target": 30,
            "repeat": "",
            "dateRange": ["2025-01-01", "2025-06-30"],
        }
    )
    assert task.kind == TaskKind.LONG_TERM
    assert task.date_range() is not None

    cycle = commands.create_task(CreateTaskRequest(name="Gym", kind="cycle", repeat_rule="daily"))
    assert cycle.repeat_rule == RepeatRule.DAILY


def test_full_lifecycle_through_commands(commands: TaskCommands) -> None:
    task = commands.create_task({"name": "Read", "kind": "once", "target": 2})

    task = commands.increase_task_progress({"id": task.id})
    task = commands.update_task({"id": task.id, "name": "Read more", "target": 1})
    assert (task.name, task.progress, task.status) == ("Read more", 1, TaskStatus.COMPLETED)

    task = commands.archive_task({"id": task.id})
    assert task.status == TaskStatus.ARCHIVED
    task = commands.reopen_task({"id": task.id})
    assert task.status == TaskStatus.ACTIVE

    assert [t.id for t in commands.list_tasks("active")] == [task.id]
    commands.delete_task({"id": task.id})
    assert commands.list_tasks() == []


@pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": "   "}, {"id": 7}])
def test_commands_require_an_id(commands: TaskCommands, payload: dict) -> None:
    with pytest.raises(ValidationError):
        commands.increase_task_progress(payload)
    with pytest.raises(ValidationError):
        commands.update_task({**payload, "name": "x"})


def test_commands_raise_typed_errors(commands: TaskCommands) -> None:
    task = commands.create_task({"name": "Read", "kind": "once"})

    with pytest.raises(NotFound):
        commands.delete_task({"id": "missing"})
    with pytest.raises(ImmutableFieldError):
        commands.update_task({"id": task.id, "kind": "cycle", "repeat": "daily"})
    commands.archive_task({"id": task.id})
    with pytest.raises(IllegalTransitionError):
        commands.increase_task_progress({"id": task.id})


def test_non_mapping_payload_is_rejected(commands: TaskCommands) -> None:
    with pytest.raises(ValidationError):
        commands.create_task(["name", "Read"])


def test_import_and_stats(commands: TaskCommands) -> None:
    report = commands.import_tasks(
        [{"name": "A", "kind": "once"}, {"name": "B", "kind": "bogus"}]
    )
    assert len(report.created) == 1
    assert report.failed[0].index == 1

    stats = commands.task_stats()
    assert stats.active == 1


def test_import_reports_non_object_entries_and_continues(commands: TaskCommands) -> None:
    report = commands.import_tasks(
        [{"name": "A", "kind": "once"}, "junk", None, {"name": "B", "kind": "once"}]
    )

    assert sorted(t.name for t in report.created) == ["A", "B"]
    assert [(f.index, f.error) for f in report.failed] == [
        (1, "validation_error"),
        (2, "validation_error"),
    ]
    assert len(commands.list_tasks()) == 2


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "Read", "kind": "once", "target": 3, "description": "novel"},
        {"name": "Gym", "kind": "cycle", "target": 2, "repeat_rule": "weekly"},
        {
            "name": "Study",
            "kind": "long_term",
            "target": 30,
            "start_date": "2025-01-01",
            "end_date": "2025-06-30",
        },
    ],
)
def test_update_with_identical_fields_only_touches_updated_at(
    commands: TaskCommands, fields: dict
) -> None:
    created = commands.create_task(fields)
    updated = commands.update_task({"id": created.id, **fields})

    assert updated.updated_at > created.updated_at
    assert updated.model_copy(update={"updated_at": created.updated_at}) == created
    assert commands.get_task({"id": created.id}) == updated


def test_from_settings_seeds_empty_store(home: Path) -> None:
    settings = Settings(backend=StoreBackend.MEMORY, data_dir=home / "data", seed_on_empty=True)
    commands = TaskCommands.from_settings(settings)
    assert len(commands.list_tasks()) == 3


def test_from_settings_uses_configured_store(home: Path) -> None:
    settings = Settings(backend=StoreBackend.JSON, data_dir=home / "data")
    first = TaskCommands.from_settings(settings)
    task = first.create_task({"name": "Persist", "kind": "once"})

    second = TaskCommands.from_settings(settings)
    assert second.get_task({"id": task.id}) == task
