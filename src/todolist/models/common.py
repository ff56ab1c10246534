"""Shared model helpers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Container

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def unique_id(taken: Container[str], factory: Callable[[], str] = new_id) -> str:
    """Draw identifiers from ``factory`` until one is not in ``taken``."""

    candidate = factory()
    while candidate in taken:
        candidate = factory()
    return candidate


__all__ = ["Clock", "new_id", "unique_id", "utcnow"]
