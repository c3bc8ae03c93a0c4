"""Tests for ChatNotificationService fan-out to chat rooms."""

import asyncio
import logging
import uuid

import pytest

from unistay.chat.commands import SendMessageCommand, EditMessageCommand, LeaveChatCommand
from unistay.common.exceptions.exceptions import InfrastructureError
from unistay.realtime.chat_notification_service import ChatNotificationService
from unistay.realtime.connection import ChatConnection
from unistay.realtime.room_bus import InMemoryRoomBus

from tests.fakes.failing_chat_store import FailingChatStore
from tests.fakes.fake_websocket import FakeWebSocket

pytestmark = pytest.mark.anyio


class BrokenRoomBus(InMemoryRoomBus):
    async def broadcast(self, room, event, exclude=None):
        raise ConnectionError("bus is down")


@pytest.fixture
def room_bus() -> InMemoryRoomBus:
    return InMemoryRoomBus()


@pytest.fixture
def service(room_bus, chat_store, user_directory) -> ChatNotificationService:
    return ChatNotificationService(room_bus, chat_store, user_directory)


async def _listen(room_bus, service, chat_id, user) -> FakeWebSocket:
    websocket = FakeWebSocket()
    connection = ChatConnection(websocket, user.id, user_name=user.display_name)
    await room_bus.register(connection)
    await room_bus.subscribe(connection.conn_id, service.room_for(chat_id))
    return websocket


async def test_room_name_is_prefixed_chat_id(service, make_chat, alice) -> None:
    chat = await make_chat(alice)

    assert service.room_for(chat.id) == f"chat_{chat.id}"


async def test_new_message_carries_stored_view_with_sender(command_bus, service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    socket = await _listen(room_bus, service, chat.id, alice)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="Keys are under the mat")
    )).unwrap()

    await service.notify_new_message(message)

    [event] = socket.events()
    assert event["t"] == "ReceiveMessage"
    assert event["p"]["id"] == str(message.id)
    assert event["p"]["content"] == "Keys are under the mat"
    assert event["p"]["sender"]["first_name"] == "Bob"
    assert "ts" in event


async def test_edited_message_is_refetched(command_bus, service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="draft")
    )).unwrap()
    (await command_bus.send(EditMessageCommand(
        chat_id=chat.id, message_id=message.id, requesting_user_id=bob.id, content="final",
    ))).unwrap()
    socket = await _listen(room_bus, service, chat.id, alice)

    # The stale entity still says "draft"; the event must reflect the store
    await service.notify_message_edited(message)

    [event] = socket.events()
    assert event["t"] == "MessageEdited"
    assert event["p"]["content"] == "final"
    assert event["p"]["is_edited"] is True


async def test_deleted_message_payload(service, room_bus, make_chat, alice) -> None:
    chat = await make_chat(alice)
    socket = await _listen(room_bus, service, chat.id, alice)
    message_id = uuid.uuid4()

    await service.notify_message_deleted(chat.id, message_id)

    [event] = socket.events()
    assert event == {
        "t": "MessageDeleted",
        "p": {"chat_id": str(chat.id), "message_id": str(message_id)},
        "ts": event["ts"],
    }


async def test_user_joined_includes_member_view(service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    socket = await _listen(room_bus, service, chat.id, alice)

    await service.notify_user_joined(chat.id, bob.id)

    [event] = socket.events()
    assert event["t"] == "UserJoined"
    assert event["p"]["chat_id"] == str(chat.id)
    assert event["p"]["member"]["user_id"] == str(bob.id)
    assert event["p"]["member"]["role"] == "member"


async def test_user_left(command_bus, service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    socket = await _listen(room_bus, service, chat.id, alice)
    (await command_bus.send(LeaveChatCommand(chat_id=chat.id, user_id=bob.id))).unwrap()

    await service.notify_user_left(chat.id, bob.id)

    assert socket.events()[0]["p"] == {"chat_id": str(chat.id), "user_id": str(bob.id)}


async def test_other_rooms_do_not_receive(command_bus, service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    other = await make_chat(alice, name="Other")
    socket = await _listen(room_bus, service, other.id, alice)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="hi")
    )).unwrap()

    await service.notify_new_message(message)

    assert socket.sent == []


async def test_store_failure_is_logged_not_raised(command_bus, room_bus, chat_store, user_directory, make_chat, alice, bob, caplog) -> None:
    chat = await make_chat(alice, bob)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="hi")
    )).unwrap()
    store = FailingChatStore(chat_store)
    store.fail_on("get_message", InfrastructureError("connection reset"))
    service = ChatNotificationService(room_bus, store, user_directory)
    socket = await _listen(room_bus, service, chat.id, alice)

    with caplog.at_level(logging.ERROR, logger="unistay.realtime.notifications"):
        await service.notify_new_message(message)

    assert socket.sent == []
    assert "Failed to notify new message" in caplog.text


async def test_broadcast_failure_is_swallowed(chat_store, user_directory, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    service = ChatNotificationService(BrokenRoomBus(), chat_store, user_directory)

    await service.notify_user_joined(chat.id, bob.id)
    await service.notify_user_left(chat.id, bob.id)
    await service.notify_message_deleted(chat.id, chat.id)


async def test_cancellation_is_not_swallowed(command_bus, room_bus, chat_store, user_directory, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="hi")
    )).unwrap()
    store = FailingChatStore(chat_store)
    store.fail_on("get_message", asyncio.CancelledError())
    service = ChatNotificationService(room_bus, store, user_directory)

    with pytest.raises(asyncio.CancelledError):
        await service.notify_new_message(message)


async def test_dead_socket_does_not_block_others(command_bus, service, room_bus, make_chat, alice, bob) -> None:
    chat = await make_chat(alice, bob)
    dead = await _listen(room_bus, service, chat.id, alice)
    dead.fail_with = ConnectionResetError("peer gone")
    alive = await _listen(room_bus, service, chat.id, bob)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="hi")
    )).unwrap()

    await service.notify_new_message(message)

    assert alive.event_types() == ["ReceiveMessage"]


class HoldNewMessagesRoomBus(InMemoryRoomBus):
    """Holds ReceiveMessage broadcasts until some other event has gone out"""

    def __init__(self):
        super().__init__()
        self.other_event_sent = asyncio.Event()

    async def broadcast(self, room, event, exclude=None):
        if event["t"] == "ReceiveMessage":
            await self.other_event_sent.wait()
        await super().broadcast(room, event, exclude)
        if event["t"] != "ReceiveMessage":
            self.other_event_sent.set()


async def test_no_per_room_ordering_between_concurrent_notifications(command_bus, chat_store, user_directory, make_chat, alice, bob) -> None:
    # Fan-out calls for one chat are not serialized: a slow broadcast can be
    # overtaken by a later one, so clients may see events out of call order.
    room_bus = HoldNewMessagesRoomBus()
    service = ChatNotificationService(room_bus, chat_store, user_directory)
    chat = await make_chat(alice, bob)
    socket = await _listen(room_bus, service, chat.id, alice)
    message = (await command_bus.send(
        SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content="first")
    )).unwrap()
    other_id = uuid.uuid4()

    await asyncio.wait_for(
        asyncio.gather(
            service.notify_new_message(message),
            service.notify_message_deleted(chat.id, other_id),
        ),
        timeout=2,
    )

    assert sorted(socket.event_types()) == ["MessageDeleted", "ReceiveMessage"]
    assert socket.event_types() == ["MessageDeleted", "ReceiveMessage"]
