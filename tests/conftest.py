from datetime import UTC, datetime
from pathlib import Path

import pytest

from timemaster.application import TaskEngine
from timemaster.infrastructure.storage import (
    InMemoryTaskRepository,
    JsonTaskRepository,
    SqliteTaskRepository,
    TaskRepository,
)
from timemaster.interfaces.commands import TaskCommands

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

ENV_VARS = (
    "TIMEMASTER_HOME",
    "TIMEMASTER_BACKEND",
    "TIMEMASTER_DATA_DIR",
    "TIMEMASTER_LOG_LEVEL",
    "TIMEMASTER_SEED",
)


def make_repository(backend: str, tmp_path: Path) -> TaskRepository:
    if backend == "json":
        return JsonTaskRepository(tmp_path / "data")
    if backend == "sqlite":
        return SqliteTaskRepository(tmp_path / "data" / "timemaster.db")
    return InMemoryTaskRepository()


@pytest.fixture(params=["memory", "json", "sqlite"])
def repo(request: pytest.FixtureRequest, tmp_path: Path) -> TaskRepository:
    """A fresh, empty repository for each backend."""
    repository = make_repository(request.param, tmp_path)
    yield repository
    repository.close()


@pytest.fixture()
def engine(repo: TaskRepository) -> TaskEngine:
    return TaskEngine(repo)


@pytest.fixture()
def commands() -> TaskCommands:
    """Command surface over an in-memory store."""
    return TaskCommands(TaskEngine(InMemoryTaskRepository()))


@pytest.fixture()
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at tmp_path and clear env overrides."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home_dir = tmp_path / "home"
    home_dir.mkdir(parents=True)
    monkeypatch.setenv("TIMEMASTER_HOME", str(home_dir))
    return home_dir
