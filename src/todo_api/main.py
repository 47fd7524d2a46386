from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import StorageError
from .repositories import Repository, open_repository
from .routers import todos as todos_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "todos", "description": "CRUD operations for Todo items."},
]

METHOD_NOT_ALLOWED = "Method not allowed"


def _format_validation_errors(exc: RequestValidationError) -> str:
    """
    Flatten pydantic/FastAPI error details into a single line of text, e.g.
    "path.todo_id: Input should be a valid integer, unable to parse string as an integer".
    """
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid input")
        ctx_error = (err.get("ctx") or {}).get("error")
        if ctx_error:
            msg = f"{msg}: {ctx_error}"
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid request"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Malformed JSON bodies and non-integer ids are client input errors (400)."""
    return PlainTextResponse(_format_validation_errors(exc), status_code=400)


async def storage_exception_handler(request: Request, exc: StorageError) -> PlainTextResponse:
    """Every storage failure, not-found included, is reported as a 500 with the raw error text."""
    logger.error("storage error in %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=500)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    message = METHOD_NOT_ALLOWED if exc.status_code == 405 else str(exc.detail)
    return PlainTextResponse(message, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@asynccontextmanager
async def _open_repository_on_startup(app: FastAPI) -> AsyncIterator[None]:
    # Only reached when create_app() was called without a repository
    app.state.repository = open_repository()
    yield


# PUBLIC_INTERFACE
def create_app(repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application around a repository.

    The repository lives on app.state and is handed to each handler through a
    dependency. If none is given, it is opened from settings at startup and a
    StorageError aborts the startup. ASGI servers can call it as a factory:
    `uvicorn --factory todo_api.main:create_app`.
    """
    app = FastAPI(
        title="Todo Service",
        description="Minimal CRUD service for todo items backed by a relational table.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=None if repository is not None else _open_repository_on_startup,
    )
    if repository is not None:
        app.state.repository = repository

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(todos_router.router)
    return app

