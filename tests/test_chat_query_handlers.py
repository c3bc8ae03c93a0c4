"""Tests for chat query handlers running through the query bus."""

import uuid

import pytest

from unistay.chat.commands import (
    DeactivateChatCommand,
    SendMessageCommand,
    DeleteMessageCommand,
    LeaveChatCommand,
)
from unistay.chat.enums import ChatMemberRole
from unistay.chat.exceptions import ChatNotFoundError, UserNotMemberError
from unistay.chat.queries import (
    GetChatByIdQuery,
    GetUserChatsQuery,
    GetChatMembersQuery,
    GetChatMessagesQuery,
    IsUserMemberQuery,
)

pytestmark = pytest.mark.anyio


class TestGetChatById:
    async def test_member_sees_chat_with_members(self, query_bus, make_chat, alice, bob) -> None:
        chat = await make_chat(alice, bob)

        view = (await query_bus.query(GetChatByIdQuery(chat_id=chat.id, user_id=bob.id))).unwrap()

        assert view.id == chat.id
        assert view.creator.id == alice.id
        assert view.member_count == 2
        assert [m.user_id for m in view.owners] == [alice.id]
        assert view.members[1].user.display_name == "Bob Keller"

    async def test_outsider_is_rejected(self, query_bus, make_chat, alice, carol) -> None:
        chat = await make_chat(alice)

        result = await query_bus.query(GetChatByIdQuery(chat_id=chat.id, user_id=carol.id))

        assert isinstance(result.error, UserNotMemberError)

    async def test_deactivated_chat_is_not_found(self, command_bus, query_bus, make_chat, alice) -> None:
        chat = await make_chat(alice)
        (await command_bus.send(DeactivateChatCommand(chat_id=chat.id, requestor_id=alice.id))).unwrap()

        result = await query_bus.query(GetChatByIdQuery(chat_id=chat.id, user_id=alice.id))

        assert isinstance(result.error, ChatNotFoundError)

    async def test_unknown_chat(self, query_bus, alice) -> None:
        result = await query_bus.query(GetChatByIdQuery(chat_id=uuid.uuid4(), user_id=alice.id))

        assert isinstance(result.error, ChatNotFoundError)


class TestGetUserChats:
    async def test_lists_only_active_chats_with_active_membership(self, command_bus, query_bus, make_chat, alice, bob) -> None:
        kept = await make_chat(alice, bob, name="Flatmates")
        left = await make_chat(alice, bob, name="Old Lease")
        closed = await make_chat(alice, bob, name="Closed")
        (await command_bus.send(LeaveChatCommand(chat_id=left.id, user_id=bob.id))).unwrap()
        (await command_bus.send(DeactivateChatCommand(chat_id=closed.id, requestor_id=alice.id))).unwrap()

        chats = (await query_bus.query(GetUserChatsQuery(user_id=bob.id))).unwrap()

        assert [c.id for c in chats] == [kept.id]

    async def test_user_without_chats(self, query_bus, dave) -> None:
        assert (await query_bus.query(GetUserChatsQuery(user_id=dave.id))).unwrap() == []


class TestGetChatMembers:
    async def test_active_members_in_join_order(self, command_bus, query_bus, make_chat, alice, bob, carol) -> None:
        chat = await make_chat(alice, bob, carol)
        (await command_bus.send(LeaveChatCommand(chat_id=chat.id, user_id=bob.id))).unwrap()

        members = (await query_bus.query(GetChatMembersQuery(chat_id=chat.id, user_id=alice.id))).unwrap()

        assert [m.user_id for m in members] == [alice.id, carol.id]
        assert members[0].role == ChatMemberRole.OWNER


class TestGetChatMessages:
    async def test_newest_first_without_deleted(self, command_bus, query_bus, make_chat, alice, bob) -> None:
        chat = await make_chat(alice, bob)
        sent = []
        for text in ("one", "two", "three"):
            sent.append((await command_bus.send(
                SendMessageCommand(chat_id=chat.id, sender_id=bob.id, content=text)
            )).unwrap())
        (await command_bus.send(DeleteMessageCommand(
            chat_id=chat.id, message_id=sent[1].id, requesting_user_id=bob.id,
        ))).unwrap()

        messages = (await query_bus.query(GetChatMessagesQuery(chat_id=chat.id, user_id=alice.id))).unwrap()

        assert [m.content for m in messages] == ["three", "one"]
        assert messages[0].sender.id == bob.id

    async def test_paging(self, command_bus, query_bus, make_chat, alice) -> None:
        chat = await make_chat(alice)
        for i in range(5):
            (await command_bus.send(
                SendMessageCommand(chat_id=chat.id, sender_id=alice.id, content=f"m{i}")
            )).unwrap()

        page = (await query_bus.query(
            GetChatMessagesQuery(chat_id=chat.id, user_id=alice.id, skip=1, take=2)
        )).unwrap()

        assert [m.content for m in page] == ["m3", "m2"]

    async def test_take_is_bounded(self, alice) -> None:
        with pytest.raises(ValueError):
            GetChatMessagesQuery(chat_id=uuid.uuid4(), user_id=alice.id, take=101)

    async def test_outsider_cannot_read(self, query_bus, make_chat, alice, carol) -> None:
        chat = await make_chat(alice)

        result = await query_bus.query(GetChatMessagesQuery(chat_id=chat.id, user_id=carol.id))

        assert isinstance(result.error, UserNotMemberError)


async def test_is_user_member(command_bus, query_bus, make_chat, alice, bob, carol) -> None:
    chat = await make_chat(alice, bob)
    (await command_bus.send(LeaveChatCommand(chat_id=chat.id, user_id=bob.id))).unwrap()

    assert (await query_bus.query(IsUserMemberQuery(chat_id=chat.id, user_id=alice.id))).unwrap() is True
    assert (await query_bus.query(IsUserMemberQuery(chat_id=chat.id, user_id=bob.id))).unwrap() is False
    assert (await query_bus.query(IsUserMemberQuery(chat_id=chat.id, user_id=carol.id))).unwrap() is False
