from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from todolist.core.config import Settings
from todolist.main import create_app
from todolist.services import ApiService

FAST_CRYPT_OPTIONS = {"rounds": 1000}
SESSION_TIMEOUT = timedelta(minutes=30)


class FakeClock:
    """Manually advanced clock handed to the services instead of ``utcnow``."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@dataclass(slots=True)
class RegisteredUser:
    id: str
    user_name: str
    secret: str


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings() -> Settings:
    return Settings(environment="test", session_secret_key="test-session-key")


@pytest.fixture()
def service(clock: FakeClock) -> ApiService:
    return ApiService(
        crypt_options=FAST_CRYPT_OPTIONS,
        session_timeout=SESSION_TIMEOUT,
        clock=clock,
    )


@pytest.fixture()
def register(service: ApiService):
    async def _register(user_name: str, secret: str = "aFf3cted!", **user_info: object) -> RegisteredUser:
        await service.create_user(user_name, secret, user_info or None)
        user = await service.get_user_by_name(user_name)
        return RegisteredUser(id=user.id, user_name=user_name, secret=secret)

    return _register


@pytest.fixture()
def app(settings: Settings, service: ApiService) -> FastAPI:
    return create_app(settings, service)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
