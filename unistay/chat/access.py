# =============================================================================
# File: unistay/chat/access.py
# Description: Lookup-and-authorize helpers shared by chat handlers
# =============================================================================
"""
Each helper loads what a handler needs from the store and raises the
matching chat exception when it is missing or the actor may not use it.
Handlers call them in a fixed order so the first failing check decides
which error the caller sees.
"""

from __future__ import annotations

import uuid
from typing import Iterable

from unistay.chat.entities import Chat, ChatMember, ChatMessage
from unistay.chat.enums import ChatMemberRole
from unistay.chat.exceptions import (
    ChatNotFoundError,
    ChatInactiveError,
    ChatMessageNotFoundError,
    ChatMessageOperationFailedError,
    InsufficientPermissionsError,
    UserNotMemberError,
)
from unistay.chat.ports.chat_store_port import ChatStorePort


async def load_chat(store: ChatStorePort, chat_id: uuid.UUID) -> Chat:
    chat = await store.get_chat(chat_id)
    if chat is None:
        raise ChatNotFoundError(chat_id)
    return chat


def ensure_active(chat: Chat) -> None:
    if not chat.is_active:
        raise ChatInactiveError(chat.id)


async def require_member(
        store: ChatStorePort,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
) -> ChatMember:
    """Active membership of user in chat"""
    member = await store.get_member_by_chat_and_user(chat_id, user_id)
    if member is None:
        raise UserNotMemberError(user_id, chat_id)
    return member


def require_role(
        member: ChatMember,
        roles: Iterable[ChatMemberRole],
        action: str,
) -> None:
    if member.role not in frozenset(roles):
        raise InsufficientPermissionsError(member.user_id, member.chat_id, action)


async def load_message_in_chat(
        store: ChatStorePort,
        chat_id: uuid.UUID,
        message_id: uuid.UUID,
        operation: str,
) -> ChatMessage:
    """
    Message by id, checked against the chat it was addressed through.

    A mismatch means the caller combined ids from different chats, which
    is reported as an operation failure rather than not-found.
    """
    message = await store.get_message(message_id)
    if message is None:
        raise ChatMessageNotFoundError(message_id)
    if message.chat_id != chat_id:
        raise ChatMessageOperationFailedError(
            message_id,
            operation,
            f"Message does not belong to chat {chat_id}.",
        )
    return message


def require_sender(member: ChatMember, message: ChatMessage, action: str) -> None:
    """Only the author may change a message, whatever their role"""
    if not message.is_sent_by(member.user_id):
        raise InsufficientPermissionsError(member.user_id, member.chat_id, action)
