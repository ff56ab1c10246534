"""User records and their public projection."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common import utcnow


class UserInfo(BaseModel):
    """Public part of a user, safe to return to clients."""

    model_config = ConfigDict(extra="ignore")

    display_name: str | None = None
    image: str | None = None
    email: EmailStr | None = None
    email_verified: bool = False
    details: Any | None = None


class User(BaseModel):
    """Registered user; only ``user_info.email_verified`` and ``expires`` change after creation."""

    id: str
    user_name: str
    hashed_secret: str
    salt: str
    user_info: UserInfo = Field(default_factory=UserInfo)
    expires: datetime | None = None
    created: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime) -> bool:
        return self.expires is not None and self.expires <= now


__all__ = ["User", "UserInfo"]
