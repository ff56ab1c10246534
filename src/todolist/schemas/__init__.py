"""Pydantic schemas exposed by the HTTP layer.

``schemas.auth`` depends on the domain models and is imported directly by
the routers that need it.
"""

from __future__ import annotations

from .system import ErrorEnvelope, HealthStatus, ServiceMetadata
from .todo import TodoCreate, TodoCreated, TodoListResponse, TodoRead

__all__ = [
    "ErrorEnvelope",
    "HealthStatus",
    "ServiceMetadata",
    "TodoCreate",
    "TodoCreated",
    "TodoListResponse",
    "TodoRead",
]
