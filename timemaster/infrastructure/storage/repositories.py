"""Repository implementations for the task store.

- InMemoryTaskRepository: process-memory store, the fallback backend
- JsonTaskRepository: one JSON document per task on disk
"""

import logging
import threading
from pathlib import Path
from typing import Any

from timemaster.domain.shared import Err, Ok, Result
from timemaster.domain.task import (
    NotFound,
    StorageError,
    Task,
    TaskError,
    TaskStatus,
    ValidationError,
)
from timemaster.infrastructure.storage.base import (
    TaskRepository,
    describe_count,
    is_valid_task_id,
    prepare_for_create,
    record_to_task,
    sort_recent,
    task_to_record,
)
from timemaster.infrastructure.storage.json_storage import JsonStorage

logger = logging.getLogger(__name__)


class InMemoryTaskRepository(TaskRepository):
    """Task store held in process memory.

    Records are kept in serialized form and copied in and out under a
    lock, so callers never share a mutable object with the store.
    Nothing survives a restart.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._tombstones: set[str] = set()
        self._lock = threading.Lock()

    def create(self, task: Task) -> Result[str, TaskError]:
        prepared = prepare_for_create(task)
        if isinstance(prepared, Err):
            return prepared
        record = task_to_record(prepared.value)
        task_id = record["id"]

        with self._lock:
            if task_id in self._records or task_id in self._tombstones:
                return Err(ValidationError(f"Task id already used: {task_id}", ["id"]))
            self._records[task_id] = record
        return Ok(task_id)

    def get(self, task_id: str) -> Result[Task, TaskError]:
        with self._lock:
            record = self._records.get(task_id)
            record = dict(record) if record is not None else None
        if record is None:
            return Err(NotFound(task_id))
        return record_to_task(record)

    def list_all(self, status: TaskStatus | None = None) -> Result[list[Task], TaskError]:
        with self._lock:
            records = [dict(r) for r in self._records.values()]

        tasks: list[Task] = []
        for record in records:
            if status is not None and record.get("status") != status.value:
                continue
            result = record_to_task(record)
            if isinstance(result, Err):
                return result
            tasks.append(result.value)
        return Ok(sort_recent(tasks))

    def update(self, task: Task) -> Result[Task, TaskError]:
        checked = record_to_task(task_to_record(task))
        if isinstance(checked, Err):
            return checked

        with self._lock:
            if task.id not in self._records:
                return Err(NotFound(task.id))
            self._records[task.id] = task_to_record(checked.value)
        return Ok(checked.value)

    def delete(self, task_id: str) -> Result[None, TaskError]:
        with self._lock:
            if self._records.pop(task_id, None) is None:
                return Err(NotFound(task_id))
            self._tombstones.add(task_id)
        return Ok(None)

    def count(self) -> Result[int, TaskError]:
        with self._lock:
            return Ok(len(self._records))


class JsonTaskRepository(TaskRepository):
    """Task store backed by JSON files.

    Layout under ``data_dir``:
    - ``tasks/<id>.json``: one document per task, replaced atomically
    - ``tombstones.json``: ids that were deleted and must not come back

    The repository lock only guards the id namespace (create, delete and
    the tombstone file). Updates to different ids never wait on each
    other; each is a single atomic file replace.
    """

    backend = "json"

    def __init__(self, data_dir: Path, storage: JsonStorage | None = None) -> None:
        """Initialize the repository.

        Args:
            data_dir: Directory holding the task documents.
            storage: JsonStorage instance to use. Creates new one if not provided.
        """
        self._data_dir = Path(data_dir)
        self._tasks_dir = self._data_dir / "tasks"
        self._tombstones_file = self._data_dir / "tombstones.json"
        self._storage = storage or JsonStorage()
        self._lock = threading.Lock()
        self._tasks_dir.mkdir(parents=True, exist_ok=True)
        total = describe_count(self.count())
        logger.info(f"JsonTaskRepository ready dir={self._data_dir} total={total}")

    def _task_file(self, task_id: str) -> Path:
        return self._tasks_dir / f"{task_id}.json"

    def _load_tombstones(self) -> Result[set[str], TaskError]:
        if not self._tombstones_file.exists():
            return Ok(set())
        result = self._storage.load_json(self._tombstones_file)
        if isinstance(result, Err):
            logger.error(f"Failed to read tombstones: {result.error}")
            return Err(StorageError(result.error))
        if not isinstance(result.value, list):
            return Err(StorageError(f"Invalid tombstone file {self._tombstones_file}"))
        return Ok({str(item) for item in result.value})

    def _save_tombstones(self, ids: set[str]) -> Result[None, TaskError]:
        saved = self._storage.save_json(self._tombstones_file, sorted(ids))
        if isinstance(saved, Err):
            logger.error(f"Failed to write tombstones: {saved.error}")
            return Err(StorageError(saved.error))
        return Ok(None)

    def _load(self, path: Path, task_id: str) -> Result[Task, TaskError]:
        result = self._storage.load_json(path)
        if isinstance(result, Err):
            if not path.exists():
                return Err(NotFound(task_id))
            logger.error(f"Failed to read task {task_id}: {result.error}")
            return Err(StorageError(result.error))
        if not isinstance(result.value, dict):
            return Err(StorageError(f"Invalid task record in {path}"))
        return record_to_task(result.value)

    def _write(self, task: Task) -> Result[None, TaskError]:
        saved = self._storage.save_json(self._task_file(task.id), task_to_record(task))
        if isinstance(saved, Err):
            logger.error(f"Failed to write task {task.id}: {saved.error}")
            return Err(StorageError(saved.error))
        return Ok(None)

    def create(self, task: Task) -> Result[str, TaskError]:
        prepared = prepare_for_create(task)
        if isinstance(prepared, Err):
            return prepared
        record = prepared.value

        with self._lock:
            tombstones = self._load_tombstones()
            if isinstance(tombstones, Err):
                return tombstones
            if record.id in tombstones.value or self._task_file(record.id).exists():
                return Err(ValidationError(f"Task id already used: {record.id}", ["id"]))
            written = self._write(record)
            if isinstance(written, Err):
                return written

        logger.debug(f"Task stored id={record.id} kind={record.kind.value}")
        return Ok(record.id)

    def get(self, task_id: str) -> Result[Task, TaskError]:
        if not is_valid_task_id(task_id):
            return Err(NotFound(task_id))
        path = self._task_file(task_id)
        if not path.exists():
            return Err(NotFound(task_id))
        return self._load(path, task_id)

    def list_all(self, status: TaskStatus | None = None) -> Result[list[Task], TaskError]:
        listed = self._storage.list_json(self._tasks_dir)
        if isinstance(listed, Err):
            logger.error(f"Failed to list tasks: {listed.error}")
            return Err(StorageError(listed.error))

        tasks: list[Task] = []
        for path in listed.value:
            result = self._load(path, path.stem)
            if isinstance(result, Err):
                if isinstance(result.error, NotFound):
                    # Deleted while we were listing.
                    continue
                return result
            if status is None or result.value.status == status:
                tasks.append(result.value)
        return Ok(sort_recent(tasks))

    def update(self, task: Task) -> Result[Task, TaskError]:
        checked = record_to_task(task_to_record(task))
        if isinstance(checked, Err):
            return checked
        if not is_valid_task_id(task.id) or not self._task_file(task.id).exists():
            return Err(NotFound(task.id))

        written = self._write(checked.value)
        if isinstance(written, Err):
            return written
        return Ok(checked.value)

    def delete(self, task_id: str) -> Result[None, TaskError]:
        if not is_valid_task_id(task_id):
            return Err(NotFound(task_id))

        with self._lock:
            tombstones = self._load_tombstones()
            if isinstance(tombstones, Err):
                return tombstones
            path = self._task_file(task_id)
            if not path.exists():
                return Err(NotFound(task_id))

            # Tombstone before unlinking so a half-done delete never frees the id.
            saved = self._save_tombstones(tombstones.value | {task_id})
            if isinstance(saved, Err):
                return saved

            removed = self._storage.delete_json(path)
            if isinstance(removed, Err) or not removed.value:
                restored = self._save_tombstones(tombstones.value)
                if isinstance(restored, Err):
                    logger.error(f"Tombstone for {task_id} left behind: {restored.error.message}")
                if isinstance(removed, Err):
                    logger.error(f"Failed to delete task {task_id}: {removed.error}")
                    return Err(StorageError(removed.error))
                return Err(NotFound(task_id))
        return Ok(None)

    def count(self) -> Result[int, TaskError]:
        listed = self._storage.list_json(self._tasks_dir)
        if isinstance(listed, Err):
            return Err(StorageError(listed.error))
        return Ok(len(listed.value))
