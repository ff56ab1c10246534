"""Domain models for the todo list service."""

from __future__ import annotations

from .common import Clock, new_id, unique_id, utcnow
from .content import ContentEntry, match_all, valid_content
from .session import Session
from .task import (
    BlockableLinkedTask,
    LinkedTask,
    MutableTask,
    SimpleTask,
    Task,
    create_complete_all_steps_blocking_task,
    create_complete_all_task,
    create_complete_any_task,
    create_linked_task,
    create_mutable_task,
    create_simple_task,
    task_to_dict,
)
from .user import User, UserInfo

__all__ = [
    "BlockableLinkedTask",
    "Clock",
    "ContentEntry",
    "LinkedTask",
    "MutableTask",
    "Session",
    "SimpleTask",
    "Task",
    "User",
    "UserInfo",
    "create_complete_all_steps_blocking_task",
    "create_complete_all_task",
    "create_complete_any_task",
    "create_linked_task",
    "create_mutable_task",
    "create_simple_task",
    "match_all",
    "new_id",
    "task_to_dict",
    "unique_id",
    "utcnow",
    "valid_content",
]
