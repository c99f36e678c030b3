"""SQLite task store.

The schema is simple and migration-safe:
- create tables if missing
- use PRAGMA table_info to detect missing columns
- add columns with ALTER TABLE only when needed

Thread-safety:
- each method opens its own SQLite connection
- every write is a single transaction, so readers see whole records
"""

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
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
    utc_now,
)
from timemaster.infrastructure.storage.base import (
    TaskRepository,
    describe_count,
    prepare_for_create,
    record_to_task,
    sort_recent,
    task_to_record,
)

logger = logging.getLogger(__name__)

COLUMNS = (
    "id",
    "name",
    "description",
    "kind",
    "progress",
    "target",
    "repeat_rule",
    "start_date",
    "end_date",
    "status",
    "created_at",
    "updated_at",
)


class SqliteTaskRepository(TaskRepository):
    """Task store in an embedded SQLite database."""

    backend = "sqlite"

    def __init__(self, db_path: str | Path = "timemaster.db") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        total = describe_count(self.count())
        logger.info(f"SqliteTaskRepository ready db={self._db_path} total={total}")

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    kind TEXT NOT NULL,
                    progress INTEGER NOT NULL DEFAULT 0,
                    target INTEGER NOT NULL DEFAULT 1,
                    repeat_rule TEXT,
                    start_date TEXT,
                    end_date TEXT,
                    status TEXT NOT NULL DEFAULT 'active',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_tombstones (
                    id TEXT PRIMARY KEY,
                    deleted_at TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add columns an older database lacks.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info(f"SqliteTaskRepository migration: added column {name}")

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("repeat_rule", "TEXT")
            add_col("start_date", "TEXT")
            add_col("end_date", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_updated ON tasks(updated_at)")
            conn.commit()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> dict[str, Any]:
        return {name: row[name] for name in COLUMNS}

    @staticmethod
    def _record_params(record: dict[str, Any]) -> tuple[Any, ...]:
        return tuple(record[name] for name in COLUMNS)

    def _storage_error(self, action: str, exc: sqlite3.Error) -> Err[TaskError]:
        logger.error(f"SQLite {action} failed db={self._db_path}: {exc}")
        return Err(StorageError(f"Database error during {action}: {exc}"))

    # ---- public API ----

    def count(self) -> Result[int, TaskError]:
        try:
            with self._connection() as conn:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
                return Ok(int(n))
        except sqlite3.Error as e:
            return self._storage_error("count", e)

    def create(self, task: Task) -> Result[str, TaskError]:
        prepared = prepare_for_create(task)
        if isinstance(prepared, Err):
            return prepared
        record = task_to_record(prepared.value)
        task_id = record["id"]

        placeholders = ", ".join("?" for _ in COLUMNS)
        try:
            with self._connection() as conn:
                used = conn.execute(
                    "SELECT 1 FROM task_tombstones WHERE id = ?", (task_id,)
                ).fetchone()
                if used is not None:
                    return Err(ValidationError(f"Task id already used: {task_id}", ["id"]))
                try:
                    conn.execute(
                        f"INSERT INTO tasks ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                        self._record_params(record),
                    )
                except sqlite3.IntegrityError:
                    conn.rollback()
                    return Err(ValidationError(f"Task id already used: {task_id}", ["id"]))
                conn.commit()
        except sqlite3.Error as e:
            return self._storage_error("create", e)

        logger.debug(f"Task stored id={task_id} kind={record['kind']}")
        return Ok(task_id)

    def get(self, task_id: str) -> Result[Task, TaskError]:
        try:
            with self._connection() as conn:
                row = conn.execute(
                    f"SELECT {', '.join(COLUMNS)} FROM tasks WHERE id = ?", (task_id,)
                ).fetchone()
        except sqlite3.Error as e:
            return self._storage_error("get", e)

        if row is None:
            return Err(NotFound(task_id))
        return record_to_task(self._row_to_record(row))

    def list_all(self, status: TaskStatus | None = None) -> Result[list[Task], TaskError]:
        sql = f"SELECT {', '.join(COLUMNS)} FROM tasks"
        params: tuple[Any, ...] = ()
        if status is not None:
            sql += " WHERE status = ?"
            params = (status.value,)

        try:
            with self._connection() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            return self._storage_error("list", e)

        tasks: list[Task] = []
        for row in rows:
            result = record_to_task(self._row_to_record(row))
            if isinstance(result, Err):
                return result
            tasks.append(result.value)
        # Timestamps are ISO text of varying precision; order on parsed values.
        return Ok(sort_recent(tasks))

    def update(self, task: Task) -> Result[Task, TaskError]:
        checked = record_to_task(task_to_record(task))
        if isinstance(checked, Err):
            return checked
        record = task_to_record(checked.value)

        assignments = ", ".join(f"{name} = ?" for name in COLUMNS if name != "id")
        params = tuple(record[name] for name in COLUMNS if name != "id") + (record["id"],)
        try:
            with self._connection() as conn:
                cur = conn.execute(f"UPDATE tasks SET {assignments} WHERE id = ?", params)
                conn.commit()
                updated = cur.rowcount
        except sqlite3.Error as e:
            return self._storage_error("update", e)

        if updated != 1:
            return Err(NotFound(task.id))
        return Ok(checked.value)

    def delete(self, task_id: str) -> Result[None, TaskError]:
        try:
            with self._connection() as conn:
                cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
                if cur.rowcount != 1:
                    conn.rollback()
                    return Err(NotFound(task_id))
                conn.execute(
                    "INSERT OR IGNORE INTO task_tombstones (id, deleted_at) VALUES (?, ?)",
                    (task_id, utc_now().isoformat()),
                )
                conn.commit()
        except sqlite3.Error as e:
            return self._storage_error("delete", e)
        return Ok(None)
