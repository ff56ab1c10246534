"""Server side login sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .common import utcnow


class Session(BaseModel):
    id: str
    user_id: str
    created: datetime = Field(default_factory=utcnow)
    updated: datetime = Field(default_factory=utcnow)
    expires: datetime | None = None
    hashed_secret: str
    session_detail: Any | None = None
    # Only set on the copy handed back by ``create_session``.
    secret: str | None = None

    def is_active(self, now: datetime) -> bool:
        return self.expires is None or self.expires > now


__all__ = ["Session"]
