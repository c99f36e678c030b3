"""Select a task store implementation from settings."""

import logging
import sqlite3

from timemaster.domain.task import StorageError
from timemaster.global_config import Settings, StoreBackend
from timemaster.infrastructure.storage.base import TaskRepository
from timemaster.infrastructure.storage.repositories import (
    InMemoryTaskRepository,
    JsonTaskRepository,
)
from timemaster.infrastructure.storage.sqlite_repository import SqliteTaskRepository

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> TaskRepository:
    """Construct the repository named by ``settings.backend``.

    The memory backend is the fallback used when no durable medium is
    wanted; it follows the same lifecycle as the others.

    Raises:
        StorageError: If the medium cannot be opened.
    """
    if settings.backend == StoreBackend.MEMORY:
        return InMemoryTaskRepository()
    try:
        if settings.backend == StoreBackend.SQLITE:
            return SqliteTaskRepository(settings.sqlite_path)
        return JsonTaskRepository(settings.data_dir)
    except (OSError, sqlite3.Error) as e:
        logger.error(f"Cannot open {settings.backend.value} store in {settings.data_dir}: {e}")
        raise StorageError(f"Cannot open task store: {e}") from e
