from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import BaseModel

from todolist.errors import (
    AccessForbiddenException,
    AuthenticationRequiredException,
    BadRequestException,
    NotFoundException,
)
from todolist.services import ApiService
from todolist.services import content as content_module

from .conftest import FakeClock

pytestmark = pytest.mark.asyncio


class Todo(BaseModel):
    name: str
    done: bool = False


async def test_create_and_read_content(service: ApiService, register) -> None:
    alice = await register("alice")

    first = await service.create_content(alice.id, {"name": "Buy milk", "done": False})
    second = await service.create_content(alice.id, Todo(name="Walk dog"))
    third = await service.create_content(alice.id, ["a", "list", "payload"])

    entries = await service.get_contents(alice.id)
    assert [entry.id for entry in entries] == [first, second, third]
    assert (await service.get_content(alice.id, second)).content == Todo(name="Walk dog")

    dicts = await service.get_contents(alice.id, lambda entry: isinstance(entry.content, dict))
    assert [entry.id for entry in dicts] == [first]


async def test_returned_entries_do_not_alias_stored_ones(service: ApiService, register) -> None:
    alice = await register("alice")
    content_id = await service.create_content(alice.id, {"name": "Buy milk"})

    entry = await service.get_content(alice.id, content_id)
    entry.id = "hijacked"
    entry.content = {"name": "Replaced"}
    (listed,) = await service.get_contents(alice.id)
    listed.id = "also-hijacked"

    stored = await service.get_content(alice.id, content_id)
    assert stored.id == content_id
    assert stored.content == {"name": "Buy milk"}
    with pytest.raises(NotFoundException):
        await service.get_content(alice.id, "hijacked")


async def test_get_contents_without_content_is_empty(service: ApiService, register) -> None:
    alice = await register("alice")

    assert await service.get_contents(alice.id) == []
    assert await service.get_contents("unknown") == []
    with pytest.raises(NotFoundException):
        await service.get_content(alice.id, "missing")


@pytest.mark.parametrize("payload", [None, "text", b"bytes", 42, 4.2, True])
async def test_create_content_rejects_unstructured_payloads(service: ApiService, register, payload) -> None:
    alice = await register("alice")

    with pytest.raises(BadRequestException):
        await service.create_content(alice.id, payload)


async def test_create_content_requires_known_owner(service: ApiService) -> None:
    with pytest.raises(BadRequestException):
        await service.create_content("missing", {"name": "orphan"})


async def test_available_content_scenario(service: ApiService, register, clock: FakeClock) -> None:
    alice = await register("alice", "aFf3cted!")
    bob = await register("bob", "B0b's secret")
    session = await service.create_session(alice.id)
    content_id = await service.create_content(alice.id, {"name": "Buy milk"})

    assert await service.get_available_content(session.id, alice.id, content_id) == {"name": "Buy milk"}

    with pytest.raises(BadRequestException):
        await service.get_available_content(session.id, bob.id, content_id)
    with pytest.raises(NotFoundException):
        await service.get_available_content(session.id, alice.id, "missing")
    with pytest.raises(AccessForbiddenException):
        await service.get_available_content(session.id, "missing", content_id)
    with pytest.raises(AuthenticationRequiredException):
        await service.get_available_content("missing", alice.id, content_id)

    clock.advance(hours=1)
    with pytest.raises(AuthenticationRequiredException):
        await service.get_available_content(session.id, alice.id, content_id)


async def test_expired_user_cannot_read_content(service: ApiService, clock: FakeClock) -> None:
    await service.create_user("erin", "aFf3cted!", expiration=clock() + timedelta(minutes=5))
    erin = await service.get_user_by_name("erin")
    session = await service.create_session(erin.id)
    content_id = await service.create_content(erin.id, {"name": "Expiring"})

    clock.advance(minutes=5)

    with pytest.raises(AccessForbiddenException):
        await service.get_available_content(session.id, erin.id, content_id)


async def test_content_ids_are_scoped_per_owner(service: ApiService, register, monkeypatch) -> None:
    monkeypatch.setattr(content_module, "unique_id", lambda taken: "shared")
    alice = await register("alice")
    bob = await register("bob")
    alice_session = await service.create_session(alice.id)
    bob_session = await service.create_session(bob.id)

    assert await service.create_content(alice.id, {"owner": "alice"}) == "shared"
    assert await service.create_content(bob.id, {"owner": "bob"}) == "shared"

    assert await service.get_available_content(alice_session.id, alice.id, "shared") == {"owner": "alice"}
    assert await service.get_available_content(bob_session.id, bob.id, "shared") == {"owner": "bob"}
    with pytest.raises(BadRequestException):
        await service.get_available_content(alice_session.id, bob.id, "shared")


async def test_initial_content_accepts_mappings_and_entries(clock: FakeClock) -> None:
    service = ApiService(
        crypt_options={"rounds": 1000},
        clock=clock,
        content={
            "owner-1": {"a": {"name": "first"}},
            "owner-2": [{"id": "b", "content": {"name": "second"}}],
        },
    )

    assert [entry.id for entry in await service.get_contents("owner-1")] == ["a"]
    assert (await service.get_content("owner-2", "b")).content == {"name": "second"}
