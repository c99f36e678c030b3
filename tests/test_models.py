from datetime import date

import pytest
from pydantic import ValidationError

from timemaster.domain.task import RepeatRule, Task, TaskDraft, TaskKind
from timemaster.domain.task.models import canonical_fields


def test_canonical_fields_renames_front_end_spellings() -> None:
    fields = canonical_fields(
        {"name": "Run", "type": "cycle", "repeat": "daily", "description": None}
    )
    assert fields == {"name": "Run", "kind": "cycle", "repeat_rule": "daily"}


def test_canonical_fields_splits_date_range_and_prefers_it() -> None:
    fields = canonical_fields(
        {"startDate": "2024-01-01", "dateRange": ["2025-01-01", "2025-06-30"]}
    )
    assert fields == {"start_date": "2025-01-01", "end_date": "2025-06-30"}


def test_canonical_fields_drops_blank_schedule_values() -> None:
    fields = canonical_fields({"name": "Read", "repeat": "", "dateRange": []})
    assert fields == {"name": "Read"}


def test_canonical_fields_rejects_malformed_date_range() -> None:
    with pytest.raises(ValueError):
        canonical_fields({"date_range": ["2025-01-01"]})
    with pytest.raises(ValueError):
        canonical_fields({"date_range": "2025-01-01"})


def test_draft_drops_fields_that_do_not_apply_to_kind() -> None:
    draft = TaskDraft.model_validate(
        {
            "name": "Inbox zero",
            "kind": "once",
            "repeat_rule": "weekly",
            "date_range": ["2025-01-01", "2025-02-01"],
        }
    )
    assert draft.repeat_rule is None
    assert draft.start_date is None
    assert draft.end_date is None


def test_draft_requires_repeat_rule_for_cycle() -> None:
    with pytest.raises(ValidationError, match="repeat_rule"):
        TaskDraft.model_validate({"name": "Gym", "kind": "cycle"})


@pytest.mark.parametrize(
    "dates",
    [
        {"start_date": "2025-01-01"},
        {"end_date": "2025-01-01"},
        {"date_range": ["2025-06-30", "2025-01-01"]},
    ],
)
def test_draft_rejects_incomplete_or_inverted_date_range(dates: dict) -> None:
    with pytest.raises(ValidationError):
        TaskDraft.model_validate({"name": "Study", "kind": "long_term", **dates})


def test_draft_accepts_long_term_with_dates() -> None:
    draft = TaskDraft.model_validate(
        {"name": "Study", "type": "long_term", "dateRange": ["2025-01-01", "2025-06-30"]}
    )
    assert draft.kind == TaskKind.LONG_TERM
    assert draft.start_date == date(2025, 1, 1)
    assert draft.end_date == date(2025, 6, 30)


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "", "kind": "once"},
        {"name": "   ", "kind": "once"},
        {"name": "x" * 41, "kind": "once"},
        {"name": "ok", "description": "d" * 121, "kind": "once"},
        {"name": "ok", "kind": "weekly"},
        {"name": "ok", "kind": "once", "target": 0},
        {"name": "ok", "kind": "once", "colour": "red"},
    ],
)
def test_draft_rejects_malformed_payloads(payload: dict) -> None:
    with pytest.raises(ValidationError):
        TaskDraft.model_validate(payload)


def test_draft_strips_whitespace() -> None:
    draft = TaskDraft.model_validate({"name": "  Read  ", "kind": "once"})
    assert draft.name == "Read"


def test_task_rejects_progress_above_target() -> None:
    with pytest.raises(ValidationError, match="exceeds target"):
        Task(id="t1", name="Read", kind=TaskKind.ONCE, progress=4, target=3)


def test_task_helpers() -> None:
    task = Task(
        id="t1",
        name="Study",
        kind=TaskKind.LONG_TERM,
        progress=30,
        target=30,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 6, 30),
    )
    assert task.is_complete()
    assert task.date_range() == (date(2025, 1, 1), date(2025, 6, 30))

    cycle = Task(id="t2", name="Gym", kind=TaskKind.CYCLE, repeat_rule=RepeatRule.DAILY)
    assert not cycle.is_complete()
    assert cycle.date_range() is None
