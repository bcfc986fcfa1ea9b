from __future__ import annotations

import itertools
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import Dict, List

from .errors import NotFoundError
from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    """Return a fresh opaque task identifier."""
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def list_all(self) -> List[TaskEntity]:
        """Return every task, newest created first."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new task with completed=False."""

    @abstractmethod
    def get(self, task_id: str) -> TaskEntity:
        """Return a task by id. Raise NotFoundError if absent."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> TaskEntity:
        """Apply the provided fields and return the updated task. Raise NotFoundError if absent."""

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Delete a task by id. Raise NotFoundError if absent."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}
        # Insertion sequence breaks created_at ties so newer tasks sort first.
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count(1)

    def _now(self) -> datetime:
        return datetime.now()

    def list_all(self) -> List[TaskEntity]:
        with self._lock:
            ordered = sorted(
                self._items.values(),
                key=lambda t: (t["created_at"], self._seq[t["id"]]),
                reverse=True,
            )
            # Return copies to avoid external mutation
            return [t.copy() for t in ordered]

    def create(self, data: TaskCreate) -> TaskEntity:
        now = self._now()
        entity: TaskEntity = {
            "id": new_task_id(),
            "text": data.text,
            "remarks": data.remarks,
            "completed": False,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            self._seq[entity["id"]] = next(self._counter)
        logger.debug("Created task id=%s", entity["id"])
        return entity.copy()

    def get(self, task_id: str) -> TaskEntity:
        with self._lock:
            item = self._items.get(task_id)
            if item is None:
                raise NotFoundError(task_id)
            return item.copy()

    def update(self, task_id: str, data: TaskUpdate) -> TaskEntity:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                raise NotFoundError(task_id)

            updated = existing.copy()
            updated.update(data.changes())  # type: ignore[typeddict-item]
            updated["updated_at"] = self._now()

            self._items[task_id] = updated
            logger.debug("Updated task id=%s fields=%s", task_id, sorted(data.model_fields_set))
            return updated.copy()

    def delete(self, task_id: str) -> None:
        with self._lock:
            if self._items.pop(task_id, None) is None:
                raise NotFoundError(task_id)
            self._seq.pop(task_id, None)
        logger.debug("Deleted task id=%s", task_id)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository backed by the standard library sqlite3 module

    The instance is cached so the in-memory store survives across requests;
    call get_repository.cache_clear() to rebuild it.
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory task repository")
    return InMemoryRepository()
