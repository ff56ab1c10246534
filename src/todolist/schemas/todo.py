"""Schemas for todo content entries."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TodoCreate(BaseModel):
    """Payload for storing a new todo entry; ``content`` must be structured."""

    content: dict[str, Any] | list[Any] = Field(description="Application defined todo payload")


class TodoCreated(BaseModel):
    id: str


class TodoRead(BaseModel):
    id: str
    content: Any


class TodoListResponse(BaseModel):
    items: list[TodoRead]
    total: int


__all__ = ["TodoCreate", "TodoCreated", "TodoListResponse", "TodoRead"]
