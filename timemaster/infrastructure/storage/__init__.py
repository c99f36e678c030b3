"""Storage infrastructure for timemaster.

Provides the task store interface and its implementations, all using
Result monads for explicit error handling.
"""

from timemaster.infrastructure.storage.base import TaskRepository
from timemaster.infrastructure.storage.factory import build_repository
from timemaster.infrastructure.storage.json_storage import JsonStorage
from timemaster.infrastructure.storage.repositories import (
    InMemoryTaskRepository,
    JsonTaskRepository,
)
from timemaster.infrastructure.storage.sqlite_repository import SqliteTaskRepository

__all__ = [
    "TaskRepository",
    "JsonStorage",
    "InMemoryTaskRepository",
    "JsonTaskRepository",
    "SqliteTaskRepository",
    "build_repository",
]
