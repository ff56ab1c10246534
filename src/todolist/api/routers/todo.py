"""Routes exposing the logged in user's todo entries."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import ApiServiceDependency, SessionIdentityDependency
from ...errors import HttpStatusException
from ...schemas import TodoCreate, TodoCreated, TodoListResponse, TodoRead

router = APIRouter(prefix="/todo", tags=["todo"])


def _not_implemented() -> HttpStatusException:
    return HttpStatusException("Not implemented", status_code=status.HTTP_501_NOT_IMPLEMENTED)


@router.get("", response_model=TodoListResponse, summary="List the user's todo entries")
async def list_todos(identity: SessionIdentityDependency, service: ApiServiceDependency) -> TodoListResponse:
    await service.update_session(identity.session_id, identity.user_id)
    entries = await service.get_contents(identity.user_id)
    items = [TodoRead(id=entry.id, content=entry.content) for entry in entries]
    return TodoListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=TodoCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Store a new todo entry",
)
async def create_todo(
    payload: TodoCreate,
    identity: SessionIdentityDependency,
    service: ApiServiceDependency,
) -> TodoCreated:
    await service.update_session(identity.session_id, identity.user_id)
    content_id = await service.create_content(identity.user_id, payload.content)
    return TodoCreated(id=content_id)


@router.get("/{content_id}", response_model=TodoRead, summary="Read one todo entry")
async def read_todo(
    content_id: str,
    identity: SessionIdentityDependency,
    service: ApiServiceDependency,
) -> TodoRead:
    content = await service.get_available_content(identity.session_id, identity.user_id, content_id)
    return TodoRead(id=content_id, content=content)


@router.put("/{content_id}", summary="Replace a todo entry")
async def replace_todo(content_id: str, identity: SessionIdentityDependency) -> None:
    raise _not_implemented()


@router.delete("/{content_id}", summary="Delete a todo entry")
async def delete_todo(content_id: str, identity: SessionIdentityDependency) -> None:
    raise _not_implemented()
