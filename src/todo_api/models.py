from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item as returned by the
    storage backends.

    Fields:
    - id: Unique integer identifier assigned by the store, never reused
    - title: Title text (may be empty, never null)
    - completed: Boolean completion flag
    - created_at: UTC creation timestamp, set once by the store
    """

    id: int
    title: str
    completed: bool
    created_at: datetime
