"""Identity providers offering login, registration and logout to clients."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models import UserInfo
from .api import ApiService


@runtime_checkable
class IdentityProvider(Protocol):
    """Login contract shared by the in-memory store and federated providers."""

    name: str

    async def login(self, user: str, secret: str) -> UserInfo: ...

    async def register(self, user: str, secret: str) -> UserInfo: ...

    async def logout(self, user: str) -> None: ...


class InMemoryIdentityProvider:
    """User name and secret provider backed by an ``ApiService``."""

    name = "email"

    def __init__(self, service: ApiService) -> None:
        self._service = service

    async def login(self, user: str, secret: str) -> UserInfo:
        found, _ = await self._service.login(user, secret)
        return found.user_info

    async def register(self, user: str, secret: str) -> UserInfo:
        return await self._service.register(user, secret)

    async def logout(self, user: str) -> None:
        found = await self._service.get_user_by_name(user)
        await self._service.close_user_sessions(found.id)


__all__ = ["IdentityProvider", "InMemoryIdentityProvider"]
