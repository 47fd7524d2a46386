from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import List

from .errors import NotFoundError
from .models import TodoEntity
from .schemas import TodoUpdate
from .settings import Settings, get_settings


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def get_all(self) -> List[TodoEntity]:
        """Return every TodoEntity in no particular order."""

    @abstractmethod
    def get(self, todo_id: int) -> TodoEntity:
        """Return a TodoEntity by id. Raise NotFoundError if no row matches."""

    @abstractmethod
    def create(self, title: str) -> TodoEntity:
        """Create a not-completed TodoEntity and return it fully populated."""

    @abstractmethod
    def update(self, todo: TodoUpdate) -> bool:
        """
        Overwrite title and completed of the row matching todo.id.
        Return False (without raising) if no row matched.
        """

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return False (without raising) if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        # Same resolution as SQLite's CURRENT_TIMESTAMP
        return datetime.now(timezone.utc).replace(microsecond=0)

    def get_all(self) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def get(self, todo_id: int) -> TodoEntity:
        with self._lock:
            item = self._items.get(todo_id)
            if item is None:
                raise NotFoundError(todo_id)
            return item.copy()

    def create(self, title: str) -> TodoEntity:
        with self._lock:
            entity: TodoEntity = {
                "id": self._next_id,
                "title": title,
                "completed": False,
                "created_at": self._now(),
            }
            self._next_id += 1
            self._items[entity["id"]] = entity
            return entity.copy()

    def update(self, todo: TodoUpdate) -> bool:
        with self._lock:
            existing = self._items.get(todo.id)
            if existing is None:
                return False
            existing["title"] = todo.title
            existing["completed"] = todo.completed
            return True

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None


# PUBLIC_INTERFACE
def open_repository(settings: Settings | None = None) -> Repository:
    """
    Open the repository selected by settings.
    - sqlite: SQLiteRepository on settings.sqlite_db_path (schema is ensured)
    - memory: InMemoryRepository

    Raises StorageError if the database cannot be opened or the schema created.
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import SQLiteRepository

    return SQLiteRepository(settings.sqlite_db_path)
