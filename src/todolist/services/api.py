"""Facade combining the identity and content stores for the HTTP layer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from ..core.config import Settings
from ..core.security import DEFAULT_SESSION_TIMEOUT, CryptOptions
from ..models import Clock, ContentEntry, Session, User, UserInfo, utcnow
from ..models.content import ContentFilter, match_all
from .content import ContentStore
from .identity import IdentityStore

logger = logging.getLogger(__name__)


class ApiService:
    """Single entry point to users, sessions and todo content.

    Initial ``users``, ``sessions`` and ``content`` are copied into the
    service; the caller's mappings are never mutated.
    """

    def __init__(
        self,
        *,
        content: Mapping[str, Mapping[str, Any] | Iterable[Any]] | None = None,
        users: Mapping[str, User] | Iterable[User] | None = None,
        sessions: Mapping[str, Session] | Iterable[Session] | None = None,
        crypt_options: Mapping[str, Any] | None = None,
        session_timeout: timedelta | int | None = DEFAULT_SESSION_TIMEOUT,
        clock: Clock = utcnow,
    ) -> None:
        self._identity = IdentityStore(
            users=users,
            sessions=sessions,
            crypt_options=crypt_options,
            session_timeout=session_timeout,
            clock=clock,
        )
        self._content = ContentStore(self._identity, content=content)

    @property
    def identity(self) -> IdentityStore:
        return self._identity

    @property
    def crypt_options(self) -> CryptOptions:
        return self._identity.crypt_options

    @property
    def session_timeout(self) -> timedelta | None:
        return self._identity.session_timeout

    # Users and sessions

    async def create_user(
        self,
        user_name: str,
        secret: str,
        user_info: UserInfo | Mapping[str, Any] | None = None,
        expiration: datetime | None = None,
    ) -> UserInfo:
        return await self._identity.create_user(user_name, secret, user_info, expiration)

    async def get_user(self, user_id: str) -> User:
        return await self._identity.get_user(user_id)

    async def get_user_by_name(self, user_name: str) -> User:
        return await self._identity.get_user_by_name(user_name)

    async def valid_password(self, user_name: str, secret: str) -> UserInfo:
        return await self._identity.valid_password(user_name, secret)

    async def verify_email(self, user_id: str) -> UserInfo:
        return await self._identity.verify_email(user_id)

    async def create_session(self, user_id: str) -> Session:
        return await self._identity.create_session(user_id)

    async def update_session(self, session_id: str, user_id: str, detail: Any | None = None) -> Session:
        return await self._identity.update_session(session_id, user_id, detail)

    async def close_session(self, session_id: str, close_time: datetime | None = None) -> None:
        await self._identity.close_session(session_id, close_time)

    async def close_user_sessions(self, user_id: str) -> int:
        return await self._identity.close_user_sessions(user_id)

    async def verify_session_secret(self, session_id: str, secret: str) -> Session:
        return await self._identity.verify_session_secret(session_id, secret)

    async def active_session(self, session_id: str, user_id: str) -> Session:
        return self._identity.check_active_session(session_id, user_id).model_copy()

    # Content

    async def create_content(self, user_id: str, content: Any) -> str:
        return await self._content.create_content(user_id, content)

    async def get_contents(self, user_id: str, filter: ContentFilter = match_all) -> list[ContentEntry]:
        return await self._content.get_contents(user_id, filter)

    async def get_content(self, user_id: str, content_id: str) -> ContentEntry:
        return await self._content.get_content(user_id, content_id)

    async def get_available_content(self, session_id: str, user_id: str, content_id: str) -> Any:
        return await self._content.get_available_content(session_id, user_id, content_id)

    # Login flows

    async def register(
        self,
        user_name: str,
        secret: str,
        user_info: UserInfo | Mapping[str, Any] | None = None,
    ) -> UserInfo:
        return await self.create_user(user_name, secret, user_info)

    async def login(self, user_name: str, secret: str) -> tuple[User, Session]:
        """Check the password of ``user_name`` and open a new session."""

        await self.valid_password(user_name, secret)
        user = await self.get_user_by_name(user_name)
        session = await self.create_session(user.id)
        return user, session

    async def logout(self, session_id: str) -> None:
        await self.close_session(session_id)


def create_api_service(settings: Settings, *, clock: Clock = utcnow) -> ApiService:
    """Build an ``ApiService`` configured from ``settings``."""

    service = ApiService(
        crypt_options=settings.crypt_options,
        session_timeout=settings.session_timeout_ms,
        clock=clock,
    )
    logger.debug(
        "API service created",
        extra={
            "crypt_method": service.crypt_options.method,
            "session_timeout_ms": settings.session_timeout_ms,
        },
    )
    return service


__all__ = ["ApiService", "create_api_service"]
