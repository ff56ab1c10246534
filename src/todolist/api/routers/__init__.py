"""Router registrations for the todo list application."""

from __future__ import annotations

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .todo import router as todo_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(todo_router)

__all__ = ["api_router", "auth_router", "health_router", "todo_router"]
