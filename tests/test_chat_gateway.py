"""Tests for ChatGateway socket calls."""

import pytest

from unistay.chat.commands import LeaveChatCommand, DeactivateChatCommand
from unistay.realtime.chat_gateway import ChatGateway
from unistay.realtime.connection import ChatConnection
from unistay.realtime.events import room_name
from unistay.realtime.room_bus import InMemoryRoomBus

from tests.fakes.fake_websocket import FakeWebSocket

pytestmark = pytest.mark.anyio


@pytest.fixture
def room_bus() -> InMemoryRoomBus:
    return InMemoryRoomBus()


@pytest.fixture
def gateway(room_bus, chat_store) -> ChatGateway:
    return ChatGateway(room_bus, chat_store)


@pytest.fixture
def connect(room_bus):
    async def _connect(user):
        connection = ChatConnection(FakeWebSocket(), user.id, user_name=user.display_name)
        await room_bus.register(connection)
        return connection

    return _connect


def _call(name: str, chat_id=None) -> dict:
    payload = {"chat_id": str(chat_id)} if chat_id is not None else {}
    return {"t": name, "p": payload}


class TestJoinChat:
    async def test_member_joins_room(self, gateway, room_bus, connect, make_chat, alice) -> None:
        chat = await make_chat(alice)
        connection = await connect(alice)

        await gateway.handle_message(connection, _call("JoinChat", chat.id))

        assert connection.conn_id in room_bus.subscribers(room_name(chat.id))
        assert connection.websocket.event_types() == ["JoinedChat"]

    async def test_outsider_gets_error_and_no_subscription(self, gateway, room_bus, connect, make_chat, alice, carol) -> None:
        chat = await make_chat(alice)
        connection = await connect(carol)

        await gateway.handle_message(connection, _call("JoinChat", chat.id))

        assert room_bus.subscribers(room_name(chat.id)) == set()
        [event] = connection.websocket.events()
        assert event["t"] == "error"
        assert event["p"]["code"] == "NOT_MEMBER"

    async def test_membership_is_checked_on_every_join(self, gateway, command_bus, room_bus, connect, make_chat, alice, bob) -> None:
        chat = await make_chat(alice, bob)
        connection = await connect(bob)
        await gateway.handle_message(connection, _call("JoinChat", chat.id))
        await gateway.handle_message(connection, _call("LeaveChat", chat.id))
        (await command_bus.send(LeaveChatCommand(chat_id=chat.id, user_id=bob.id))).unwrap()

        await gateway.handle_message(connection, _call("JoinChat", chat.id))

        assert connection.conn_id not in room_bus.subscribers(room_name(chat.id))
        assert connection.websocket.event_types() == ["JoinedChat", "LeftChat", "error"]

    async def test_deactivated_chat_cannot_be_joined(self, gateway, command_bus, room_bus, connect, make_chat, alice, bob) -> None:
        chat = await make_chat(alice, bob)
        (await command_bus.send(DeactivateChatCommand(chat_id=chat.id, requestor_id=alice.id))).unwrap()
        connection = await connect(bob)

        await gateway.handle_message(connection, _call("JoinChat", chat.id))

        assert room_bus.subscribers(room_name(chat.id)) == set()
        [event] = connection.websocket.events()
        assert event["p"]["code"] == "CHAT_INACTIVE"

    async def test_bad_chat_id(self, gateway, connect, alice) -> None:
        connection = await connect(alice)

        await gateway.handle_message(connection, {"t": "JoinChat", "p": {"chat_id": "not-a-uuid"}})

        assert connection.websocket.events()[0]["p"]["code"] == "BAD_CHAT_ID"


class TestLeaveChat:
    async def test_leave_only_unsubscribes(self, gateway, room_bus, chat_store, connect, make_chat, alice) -> None:
        chat = await make_chat(alice)
        connection = await connect(alice)
        await gateway.handle_message(connection, _call("JoinChat", chat.id))

        await gateway.handle_message(connection, _call("LeaveChat", chat.id))

        assert room_bus.subscribers(room_name(chat.id)) == set()
        assert await chat_store.is_user_member(chat.id, alice.id)

    async def test_leaving_a_room_never_joined_is_harmless(self, gateway, connect, make_chat, alice) -> None:
        chat = await make_chat(alice)
        connection = await connect(alice)

        await gateway.handle_message(connection, _call("LeaveChat", chat.id))

        assert connection.websocket.event_types() == ["LeftChat"]


class TestTyping:
    async def test_typing_reaches_others_but_not_sender(self, gateway, connect, make_chat, alice, bob) -> None:
        chat = await make_chat(alice, bob)
        typist = await connect(bob)
        reader = await connect(alice)
        for connection in (typist, reader):
            await gateway.handle_message(connection, _call("JoinChat", chat.id))

        await gateway.handle_message(typist, _call("NotifyTyping", chat.id))
        await gateway.handle_message(typist, _call("NotifyStoppedTyping", chat.id))

        assert typist.websocket.event_types() == ["JoinedChat"]
        events = reader.websocket.events()
        assert [e["t"] for e in events] == ["JoinedChat", "UserTyping", "UserStoppedTyping"]
        assert events[1]["p"] == {
            "chat_id": str(chat.id),
            "user_id": str(bob.id),
            "user_name": "Bob Keller",
        }
        assert events[2]["p"] == {"chat_id": str(chat.id), "user_id": str(bob.id)}

    async def test_typing_does_not_touch_store(self, gateway, chat_store, connect, make_chat, alice) -> None:
        chat = await make_chat(alice)
        connection = await connect(alice)

        await gateway.handle_message(connection, _call("NotifyTyping", chat.id))

        assert await chat_store.get_chat_message_count(chat.id) == 0


class TestProtocol:
    async def test_ping(self, gateway, connect, alice) -> None:
        connection = await connect(alice)

        await gateway.handle_message(connection, {"t": "ping", "p": {"n": 1}})

        [event] = connection.websocket.events()
        assert event["t"] == "pong"
        assert event["p"] == {"n": 1}

    async def test_unknown_call(self, gateway, connect, alice) -> None:
        connection = await connect(alice)

        await gateway.handle_message(connection, {"t": "SendMessage", "p": {}})

        assert connection.websocket.events()[0]["p"]["code"] == "UNKNOWN_TYPE"

    async def test_non_object_message(self, gateway, connect, alice) -> None:
        connection = await connect(alice)

        await gateway.handle_message(connection, ["JoinChat"])

        assert connection.websocket.events()[0]["p"]["code"] == "BAD_MESSAGE"
