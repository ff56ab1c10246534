"""Reusable FastAPI dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from .core.config import Settings, get_settings
from .core.context import bind_session_identity
from .core.session import get_session_ids
from .errors import AuthenticationRequiredException
from .services import ApiService


def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""

    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


SettingsDependency = Annotated[Settings, Depends(get_app_settings)]


def get_api_service(request: Request) -> ApiService:
    """Return the ``ApiService`` owned by the running application."""

    return request.app.state.api_service


ApiServiceDependency = Annotated[ApiService, Depends(get_api_service)]


@dataclass(slots=True, frozen=True)
class SessionIdentity:
    """Identifiers carried by the signed session cookie."""

    user_id: str
    session_id: str


async def require_session_identity(request: Request) -> SessionIdentity:
    """Read the cookie identity and bind it to the request context for logging.

    The binding lives as long as the task serving the endpoint.
    """

    ids = get_session_ids(request.session)
    if ids is None:
        raise AuthenticationRequiredException("Login required")
    user_id, session_id = ids
    bind_session_identity(user_id, session_id)
    return SessionIdentity(user_id=user_id, session_id=session_id)


SessionIdentityDependency = Annotated[SessionIdentity, Depends(require_session_identity)]


__all__ = [
    "ApiServiceDependency",
    "SessionIdentity",
    "SessionIdentityDependency",
    "SettingsDependency",
    "get_api_service",
    "get_app_settings",
    "require_session_identity",
]
