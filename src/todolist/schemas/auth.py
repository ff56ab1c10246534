"""Schemas describing login and registration payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..models import UserInfo


class CredentialsRequest(BaseModel):
    """User name and secret pair sent by the login form."""

    user: str = Field(description="Registered user name")
    secret: str = Field(description="Plain text secret, checked against the password policy")


class RegisterRequest(CredentialsRequest):
    """Incoming payload for registering a new user."""

    user_info: UserInfo | None = None


class LoginResponse(BaseModel):
    """Public user information and the expiry of the opened session."""

    user_info: UserInfo
    expires: datetime | None = Field(
        default=None,
        description="Session expiry; absent when sessions never expire.",
    )


__all__ = ["CredentialsRequest", "LoginResponse", "RegisterRequest"]
