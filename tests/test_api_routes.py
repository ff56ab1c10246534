from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from todolist.core.config import Settings
from todolist.main import create_app
from todolist.services import ApiService

from .conftest import FakeClock

pytestmark = pytest.mark.asyncio

CREDENTIALS = {"user": "alice", "secret": "aFf3cted!"}


async def _register_and_login(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/register",
        json={**CREDENTIALS, "user_info": {"display_name": "Alice", "email": "alice@example.com"}},
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    response = await client.post("/api/login", json=CREDENTIALS)
    assert response.status_code == status.HTTP_200_OK, response.text
    return response.json()


async def test_health_and_metadata(client: AsyncClient, settings) -> None:
    health = await client.get("/healthz")
    assert health.status_code == status.HTTP_200_OK
    assert health.json() == {"status": "ok"}
    assert health.headers["X-Request-ID"]

    metadata = await client.get("/api/metadata")
    assert metadata.json() == {
        "name": settings.project_name,
        "environment": "test",
        "version": settings.version,
        "api_prefix": "/api",
    }


async def test_metadata_follows_configured_prefix(service: ApiService) -> None:
    settings = Settings(environment="test", session_secret_key="test-session-key", api_prefix="/v1")
    transport = ASGITransport(app=create_app(settings, service), raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        metadata = await client.get("/v1/metadata")
        legacy = await client.get("/api/metadata")
        register = await client.post("/v1/register", json=CREDENTIALS)

    assert metadata.status_code == status.HTTP_200_OK
    assert metadata.json()["api_prefix"] == "/v1"
    assert legacy.status_code == status.HTTP_404_NOT_FOUND
    assert register.status_code == status.HTTP_201_CREATED


async def test_register_returns_public_user_info(client: AsyncClient) -> None:
    response = await client.post("/api/register", json=CREDENTIALS)

    assert response.status_code == status.HTTP_201_CREATED
    payload = response.json()
    assert payload["display_name"] == "alice"
    assert payload["email_verified"] is False
    assert "secret" not in response.text
    assert "hashed_secret" not in payload


async def test_register_ignores_client_email_verified(client: AsyncClient, service: ApiService) -> None:
    response = await client.post(
        "/api/register",
        json={**CREDENTIALS, "user_info": {"email": "ceo@example.com", "email_verified": True}},
    )

    assert response.status_code == status.HTTP_201_CREATED, response.text
    assert response.json()["email_verified"] is False
    stored = await service.get_user_by_name("alice")
    assert stored.user_info.email == "ceo@example.com"
    assert stored.user_info.email_verified is False


async def test_register_rejects_weak_secret(client: AsyncClient) -> None:
    response = await client.post("/api/register", json={"user": "alice", "secret": "aaaa1111"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["code"] == "invalid_parameter"
    assert payload["details"]["parameter_name"] == "user_name or secret"
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_login_failures(client: AsyncClient) -> None:
    unknown = await client.post("/api/login", json=CREDENTIALS)
    assert unknown.status_code == status.HTTP_404_NOT_FOUND

    await client.post("/api/register", json=CREDENTIALS)
    wrong = await client.post("/api/login", json={"user": "alice", "secret": "Wr0ng!!"})
    assert wrong.status_code == status.HTTP_403_FORBIDDEN
    assert wrong.json()["code"] == "forbidden"
    assert wrong.json()["details"]["status_message"] == "Forbidden"


async def test_todo_flow(client: AsyncClient, service: ApiService) -> None:
    login = await _register_and_login(client)
    assert login["user_info"]["display_name"] == "Alice"
    assert login["expires"] is not None

    created = await client.post("/api/todo", json={"content": {"name": "Buy milk", "done": False}})
    assert created.status_code == status.HTTP_201_CREATED
    todo_id = created.json()["id"]

    listing = await client.get("/api/todo")
    assert listing.status_code == status.HTTP_200_OK
    assert listing.json() == {
        "items": [{"id": todo_id, "content": {"name": "Buy milk", "done": False}}],
        "total": 1,
    }

    single = await client.get(f"/api/todo/{todo_id}")
    assert single.json() == {"id": todo_id, "content": {"name": "Buy milk", "done": False}}

    missing = await client.get("/api/todo/missing")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["code"] == "not_found"

    for method in ("PUT", "DELETE"):
        response = await client.request(method, f"/api/todo/{todo_id}")
        assert response.status_code == status.HTTP_501_NOT_IMPLEMENTED
        assert response.json()["code"] == "not_implemented"

    logout = await client.post("/api/logout")
    assert logout.status_code == status.HTTP_204_NO_CONTENT

    after = await client.get("/api/todo")
    assert after.status_code == status.HTTP_401_UNAUTHORIZED
    assert after.headers["WWW-Authenticate"] == "Session"


async def test_login_closes_previous_cookie_session(client: AsyncClient, service: ApiService) -> None:
    await _register_and_login(client)
    await client.post("/api/login", json=CREDENTIALS)

    now = service.identity.now()
    active = [session for session in service.identity.sessions.values() if session.is_active(now)]
    assert len(service.identity.sessions) == 2
    assert len(active) == 1


async def test_invalid_todo_payload_is_rejected(client: AsyncClient) -> None:
    await _register_and_login(client)

    response = await client.post("/api/todo", json={"content": "just text"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["code"] == "validation_error"


async def test_requests_without_login_require_authentication(client: AsyncClient) -> None:
    response = await client.get("/api/todo")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "unauthorized"

    logout = await client.post("/api/logout")
    assert logout.status_code == status.HTTP_204_NO_CONTENT


async def test_expired_session_requires_new_login(client: AsyncClient, clock: FakeClock) -> None:
    await _register_and_login(client)

    clock.advance(minutes=20)
    assert (await client.get("/api/todo")).status_code == status.HTTP_200_OK
    clock.advance(minutes=20)
    assert (await client.get("/api/todo")).status_code == status.HTTP_200_OK

    clock.advance(minutes=31)
    expired = await client.get("/api/todo")
    assert expired.status_code == status.HTTP_401_UNAUTHORIZED


async def test_unhandled_error_hides_internal_details(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "code": "server_error",
        "message": "Internal server error.",
        "details": {"request_id": response.headers["X-Request-ID"]},
    }
    assert "Sensitive" not in response.text
