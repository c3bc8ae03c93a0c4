"""HTTP tests for the chat router and error mapping."""

import uuid

import httpx
import pytest
from jose import jwt

from unistay.config.jwt_config import reset_jwt_config
from unistay.core.startup.services import initialize_chat_services
from unistay.realtime.room_bus import InMemoryRoomBus
from unistay.server import create_app

pytestmark = pytest.mark.anyio

SECRET = "test-secret"
GENERIC_MESSAGE = "An error occurred while processing the chat request."


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET_KEY", SECRET)
    reset_jwt_config()
    yield SECRET
    reset_jwt_config()


@pytest.fixture
def app(jwt_secret, chat_store, user_directory):
    application = create_app()
    initialize_chat_services(application, chat_store, user_directory, InMemoryRoomBus())
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth(user) -> dict:
    token = jwt.encode({"sub": str(user.id)}, SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


async def _create_chat(client, owner, *members, name="Study Group") -> dict:
    response = await client.post("/api/chats", json={"name": name}, headers=auth(owner))
    assert response.status_code == 201
    chat = response.json()
    for member in members:
        added = await client.post(
            f"/api/chats/{chat['id']}/members", json={"user_id": str(member.id)}, headers=auth(owner)
        )
        assert added.status_code == 201
    return chat


# =============================================================================
# Authentication
# =============================================================================

class TestAuthentication:
    async def test_missing_token(self, client) -> None:
        response = await client.get("/api/chats")

        assert response.status_code == 401

    async def test_token_signed_with_other_key(self, client, alice) -> None:
        token = jwt.encode({"sub": str(alice.id)}, "other-secret", algorithm="HS256")

        response = await client.get("/api/chats", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_token_without_uuid_subject(self, client) -> None:
        token = jwt.encode({"sub": "alice"}, SECRET, algorithm="HS256")

        response = await client.get("/api/chats", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


# =============================================================================
# Chats
# =============================================================================

class TestChats:
    async def test_create_returns_chat_view(self, client, alice) -> None:
        response = await client.post(
            "/api/chats",
            json={"name": "Study Group", "description": "Room 12"},
            headers=auth(alice),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Study Group"
        assert body["member_count"] == 1
        assert body["owners"][0]["user_id"] == str(alice.id)
        assert body["creator"]["email"] == alice.email

    async def test_blank_name_is_unprocessable(self, client, alice) -> None:
        response = await client.post("/api/chats", json={"name": "  "}, headers=auth(alice))

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    async def test_list_my_chats(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice, bob)

        response = await client.get("/api/chats", headers=auth(bob))

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [chat["id"]]

    async def test_unknown_chat_is_404(self, client, alice) -> None:
        response = await client.get(f"/api/chats/{uuid.uuid4()}", headers=auth(alice))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "chat_not_found"

    async def test_outsider_is_403(self, client, alice, carol) -> None:
        chat = await _create_chat(client, alice)

        response = await client.get(f"/api/chats/{chat['id']}", headers=auth(carol))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "not_member"

    async def test_update_by_owner(self, client, alice) -> None:
        chat = await _create_chat(client, alice)

        response = await client.put(
            f"/api/chats/{chat['id']}",
            json={"name": "Exam Prep", "description": None},
            headers=auth(alice),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Exam Prep"

    async def test_delete_then_hidden(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice, bob)

        response = await client.delete(f"/api/chats/{chat['id']}", headers=auth(alice))
        after = await client.get(f"/api/chats/{chat['id']}", headers=auth(alice))
        send = await client.post(
            f"/api/chats/{chat['id']}/messages", json={"content": "hello?"}, headers=auth(bob)
        )

        assert response.status_code == 204
        assert after.status_code == 404
        assert send.status_code == 400
        assert send.json()["error"]["code"] == "chat_inactive"

    async def test_admin_cannot_delete(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice)
        await client.post(
            f"/api/chats/{chat['id']}/members",
            json={"user_id": str(bob.id), "role": "admin"},
            headers=auth(alice),
        )

        response = await client.delete(f"/api/chats/{chat['id']}", headers=auth(bob))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "insufficient_permissions"


# =============================================================================
# Members
# =============================================================================

class TestMembers:
    async def test_member_cannot_add(self, client, alice, bob, carol) -> None:
        chat = await _create_chat(client, alice, bob)

        response = await client.post(
            f"/api/chats/{chat['id']}/members", json={"user_id": str(carol.id)}, headers=auth(bob)
        )

        assert response.status_code == 403

    async def test_duplicate_add_is_400(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice, bob)

        response = await client.post(
            f"/api/chats/{chat['id']}/members", json={"user_id": str(bob.id)}, headers=auth(alice)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "already_member"

    async def test_leave_and_list(self, client, alice, bob, carol) -> None:
        chat = await _create_chat(client, alice, bob, carol)

        left = await client.post(f"/api/chats/{chat['id']}/leave", headers=auth(bob))
        members = await client.get(f"/api/chats/{chat['id']}/members", headers=auth(alice))

        assert left.status_code == 204
        assert [m["user_id"] for m in members.json()] == [str(alice.id), str(carol.id)]


# =============================================================================
# Messages
# =============================================================================

class TestMessages:
    async def test_send_edit_list(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice, bob)
        base = f"/api/chats/{chat['id']}/messages"

        sent = await client.post(base, json={"content": "Meet at 6?"}, headers=auth(bob))
        edited = await client.put(
            f"{base}/{sent.json()['id']}", json={"content": "Meet at 7?"}, headers=auth(bob)
        )
        listing = await client.get(base, params={"skip": 0, "take": 10}, headers=auth(alice))

        assert sent.status_code == 201
        assert edited.status_code == 200
        assert edited.json()["edited_at"] is not None
        [message] = listing.json()
        assert message["content"] == "Meet at 7?"
        assert message["is_edited"] is True
        assert message["sender"]["id"] == str(bob.id)

    async def test_content_over_limit_is_422(self, client, alice) -> None:
        chat = await _create_chat(client, alice)
        base = f"/api/chats/{chat['id']}/messages"

        at_limit = await client.post(base, json={"content": "x" * 2000}, headers=auth(alice))
        over_limit = await client.post(base, json={"content": "x" * 2001}, headers=auth(alice))

        assert at_limit.status_code == 201
        assert over_limit.status_code == 422

    async def test_take_over_limit_is_422(self, client, alice) -> None:
        chat = await _create_chat(client, alice)

        response = await client.get(
            f"/api/chats/{chat['id']}/messages", params={"take": 101}, headers=auth(alice)
        )

        assert response.status_code == 422

    async def test_owner_cannot_edit_others_message(self, client, alice, bob) -> None:
        chat = await _create_chat(client, alice, bob)
        base = f"/api/chats/{chat['id']}/messages"
        sent = await client.post(base, json={"content": "mine"}, headers=auth(bob))

        response = await client.put(f"{base}/{sent.json()['id']}", json={"content": "x"}, headers=auth(alice))

        assert response.status_code == 403

    async def test_second_delete_is_generic_500(self, client, alice) -> None:
        chat = await _create_chat(client, alice)
        base = f"/api/chats/{chat['id']}/messages"
        sent = await client.post(base, json={"content": "oops"}, headers=auth(alice))
        url = f"{base}/{sent.json()['id']}"

        first = await client.delete(url, headers=auth(alice))
        second = await client.delete(url, headers=auth(alice))

        assert first.status_code == 200
        assert first.json()["is_deleted"] is True
        assert first.json()["content"] == "oops"
        assert second.status_code == 500
        assert second.json()["error"]["message"] == GENERIC_MESSAGE

    async def test_unknown_message_is_404(self, client, alice) -> None:
        chat = await _create_chat(client, alice)

        response = await client.delete(
            f"/api/chats/{chat['id']}/messages/{uuid.uuid4()}", headers=auth(alice)
        )

        assert response.status_code == 404


async def test_health(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["cqrs"]["handlers_registered"] == 8
    assert body["cqrs"]["query_handlers_registered"] == 5
    assert body["realtime"]["room_bus"] == "InMemoryRoomBus"
