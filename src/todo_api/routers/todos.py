from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Request, Response, status
from fastapi.exceptions import RequestValidationError

from ..repositories import Repository
from ..schemas import TodoCreate, TodoOut, TodoUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

_STORAGE_ERROR = {500: {"description": "Storage failure, returned as plain text"}}
_BAD_INPUT = {400: {"description": "Malformed JSON body or non-integer id, returned as plain text"}}

# SQLite INTEGER range; larger ids are rejected as unparseable
TodoId = Annotated[int, Path(ge=-(2**63), le=2**63 - 1, description="Todo id")]


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """
    Dependency returning the repository the application was built with.
    """
    return request.app.state.repository


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every todo item. Order is unspecified; an empty store returns [].",
    responses=_STORAGE_ERROR,
)
def list_todos(repo: Repository = Depends(get_repository)) -> List[TodoOut]:
    return [TodoOut(**t) for t in repo.get_all()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    summary="Create Todo",
    description="Create a todo from the given title. The new item is not completed.",
    responses={**_BAD_INPUT, **_STORAGE_ERROR},
)
def create_todo(payload: TodoCreate, repo: Repository = Depends(get_repository)) -> TodoOut:
    """
    Create a new Todo. The title is not validated; a missing title is stored as "".
    """
    created = repo.create(payload.title)
    logger.debug("created todo %d", created["id"])
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single todo by id. A missing todo is reported as a storage error (500).",
    responses={**_BAD_INPUT, **_STORAGE_ERROR},
)
def get_todo(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> TodoOut:
    return TodoOut(**repo.get(todo_id))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoUpdate,
    summary="Update Todo",
    description=(
        "Overwrite title and completed of a todo. The decoded body is echoed back with the "
        "id from the path; the stored row is not re-read."
    ),
    responses={**_BAD_INPUT, **_STORAGE_ERROR},
)
def put_todo(todo_id: TodoId, payload: TodoUpdate, repo: Repository = Depends(get_repository)) -> TodoUpdate:
    """
    Replace the mutable fields of a Todo. Succeeds even when no row matches the id.
    """
    todo = payload.model_copy(update={"id": todo_id})
    if not repo.update(todo):
        logger.warning("update matched no todo with id %d", todo_id)
    return todo


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_class=Response,
    summary="Delete Todo",
    description="Delete a todo by id. Responds 200 with an empty body, whether or not it existed.",
    responses={200: {"description": "Empty body"}, **_BAD_INPUT, **_STORAGE_ERROR},
)
def delete_todo(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> Response:
    if not repo.delete(todo_id):
        logger.warning("delete matched no todo with id %d", todo_id)
    return Response(status_code=status.HTTP_200_OK)


@router.api_route("/", methods=["GET", "PUT", "DELETE"], include_in_schema=False)
def empty_todo_id() -> None:
    """`/todos/` carries an empty id, which never parses."""
    raise RequestValidationError(
        [{"type": "missing", "loc": ("path", "todo_id"), "msg": "empty id", "input": ""}]
    )
