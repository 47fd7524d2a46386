from __future__ import annotations


class TodoServiceError(Exception):
    """Base class for errors raised by the todo service."""


# PUBLIC_INTERFACE
class StorageError(TodoServiceError):
    """Raised when the storage engine fails. Mapped to HTTP 500."""


# PUBLIC_INTERFACE
class NotFoundError(StorageError):
    """
    Raised when no row matches the requested id.

    This is a StorageError so the HTTP layer reports it as a 500, the same way
    as any other storage failure.
    """

    def __init__(self, todo_id: int) -> None:
        super().__init__(f"todo {todo_id} not found: no rows in result set")
        self.todo_id = todo_id
