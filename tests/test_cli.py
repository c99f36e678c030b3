import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from timemaster import __version__
from timemaster.interfaces.cli import app

runner = CliRunner()


@pytest.fixture()
def data_dir(home: Path, tmp_path: Path) -> Path:
    return tmp_path / "store"


def run(data_dir: Path, *args: str, backend: str = "json"):
    return runner.invoke(app, ["--backend", backend, "--data-dir", str(data_dir), *args])


def listed(data_dir: Path, *args: str) -> list[dict]:
    result = run(data_dir, "list", "--json", *args)
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def test_version(home: Path) -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_add_progress_and_list(data_dir: Path) -> None:
    result = run(data_dir, "add", "Read a book", "--target", "2", "--id", "book")
    assert result.exit_code == 0, result.output
    assert "Created task 'Read a book'" in result.output

    assert run(data_dir, "progress", "book").exit_code == 0
    result = run(data_dir, "progress", "book")
    assert "Completed" in result.output

    tasks = listed(data_dir)
    assert [(t["id"], t["progress"], t["status"]) for t in tasks] == [("book", 2, "completed")]

    result = run(data_dir, "list")
    assert "[x] Read a book  2/2" in result.output


def test_cycle_archive_and_reopen(data_dir: Path) -> None:
    run(data_dir, "add", "Gym", "--kind", "cycle", "--repeat", "daily", "--id", "gym")
    run(data_dir, "progress", "gym")
    assert run(data_dir, "archive", "gym").exit_code == 0
    assert listed(data_dir, "--status", "archived")[0]["progress"] == 1

    result = run(data_dir, "task", "reopen", "gym")
    assert result.exit_code == 0, result.output
    assert "(0/1)" in result.output


def test_long_term_add_and_edit(data_dir: Path) -> None:
    result = run(
        data_dir,
        "add",
        "Study",
        "--kind",
        "long_term",
        "--target",
        "30",
        "--start",
        "2025-01-01",
        "--end",
        "2025-06-30",
        "--id",
        "study",
    )
    assert result.exit_code == 0, result.output

    result = run(data_dir, "edit", "study", "--end", "2025-12-31", "--description", "steady pace")
    assert result.exit_code == 0, result.output

    (task,) = listed(data_dir)
    assert task["end_date"] == "2025-12-31"
    assert task["description"] == "steady pace"

    result = run(data_dir, "task", "show", "study")
    assert "2025-01-01 to 2025-12-31" in result.output


def test_errors_exit_with_status_1(data_dir: Path) -> None:
    result = run(data_dir, "progress", "missing")
    assert result.exit_code == 1
    assert "Task not found: missing" in result.output

    result = run(data_dir, "add", "Gym", "--kind", "cycle")
    assert result.exit_code == 1
    assert "repeat_rule" in result.output


def test_delete_requires_confirmation(data_dir: Path) -> None:
    run(data_dir, "add", "Temp", "--id", "temp")

    result = runner.invoke(
        app, ["--backend", "json", "--data-dir", str(data_dir), "delete", "temp"], input="n\n"
    )
    assert result.exit_code == 1
    assert len(listed(data_dir)) == 1

    result = run(data_dir, "delete", "temp", "--yes")
    assert result.exit_code == 0
    assert listed(data_dir) == []


def test_seed_and_stats(data_dir: Path) -> None:
    result = run(data_dir, "seed")
    assert "Seeded 3 sample tasks" in result.output
    result = run(data_dir, "seed")
    assert "nothing seeded" in result.output

    result = run(data_dir, "stats")
    assert result.exit_code == 0
    assert "Active:          3" in result.output
    assert "Completion rate: 0%" in result.output


def test_import_reports_skipped_entries(data_dir: Path, tmp_path: Path) -> None:
    source = tmp_path / "tasks.json"
    source.write_text(
        json.dumps([{"name": "A", "type": "once"}, {"name": "B", "type": "cycle"}]),
        encoding="utf-8",
    )

    result = run(data_dir, "task", "import", str(source))
    assert result.exit_code == 1
    assert "Entry #1 skipped" in result.output
    assert "Imported 1 of 2 tasks" in result.output


def test_sqlite_backend(data_dir: Path) -> None:
    result = run(data_dir, "add", "Read", "--id", "r1", backend="sqlite")
    assert result.exit_code == 0, result.output
    assert (data_dir / "timemaster.db").exists()

    result = run(data_dir, "list", "--json", backend="sqlite")
    assert json.loads(result.output)[0]["id"] == "r1"
