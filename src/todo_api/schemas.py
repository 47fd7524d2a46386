from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Echoed for created_at when a PUT body leaves it out
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _replace_surrogates(value: str) -> str:
    """
    Replace unpaired UTF-16 surrogates (valid in JSON escapes, not encodable as
    UTF-8) with U+FFFD so the title can be stored.
    """
    return "".join("\ufffd" if "\ud800" <= ch <= "\udfff" else ch for ch in value)


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Only the title is read. A missing title is stored as an empty string.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy groceries"}})

    title: str = Field(default="", description="Title of the todo item")

    @field_validator("title")
    @classmethod
    def normalize_title(cls, v: str) -> str:
        return _replace_surrogates(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for replacing the mutable fields of a Todo item.

    The whole Todo shape is accepted; the id is taken from the request path and
    created_at is echoed back untouched, never written to storage.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy groceries and supplies", "completed": True}}
    )

    id: Optional[int] = Field(default=None, description="Ignored; replaced by the id in the path")
    title: str = Field(default="", description="New title")
    completed: bool = Field(default=False, description="New completion status")
    created_at: datetime = Field(default=ZERO_TIME, description="Echoed back, never stored")

    @field_validator("title")
    @classmethod
    def normalize_title(cls, v: str) -> str:
        return _replace_surrogates(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def default_created_at(cls, v: Any) -> Any:
        """An explicit null decodes to the zero time, like an omitted field."""
        return ZERO_TIME if v is None else v


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "completed": False,
                "created_at": "2025-01-25T10:15:30Z",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Title of the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp (RFC 3339)")
