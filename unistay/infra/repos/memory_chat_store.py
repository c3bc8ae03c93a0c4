# =============================================================================
# File: unistay/infra/repos/memory_chat_store.py
# Description: In-process implementation of ChatStorePort
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, Optional, List

from unistay.chat.entities import Chat, ChatMember, ChatMessage
from unistay.chat.exceptions import UserAlreadyMemberError, MessageDeletedError

log = logging.getLogger("unistay.chat.memory_store")


class InMemoryChatStore:
    """
    Chat store kept in dictionaries, for tests and single-process demos.

    Entities are copied on the way in and out so callers never share
    state with the store. Writes touching memberships run under one lock,
    which gives the same one-active-row guarantee as the partial unique
    index in PostgreSQL.
    """

    def __init__(self):
        self._chats: Dict[uuid.UUID, Chat] = {}
        self._members: Dict[uuid.UUID, ChatMember] = {}
        self._messages: Dict[uuid.UUID, ChatMessage] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Chats
    # =========================================================================

    async def get_chat(self, chat_id: uuid.UUID) -> Optional[Chat]:
        chat = self._chats.get(chat_id)
        return chat.model_copy(deep=True) if chat else None

    async def create_chat_with_owner(self, chat: Chat, owner: ChatMember) -> None:
        async with self._lock:
            self._ensure_no_other_active(owner)
            self._chats[chat.id] = chat.model_copy(deep=True)
            self._members[owner.id] = owner.model_copy(deep=True)

    async def update_chat(self, chat: Chat) -> None:
        if chat.id in self._chats:
            self._chats[chat.id] = chat.model_copy(deep=True)

    async def get_user_chats(self, user_id: uuid.UUID) -> List[Chat]:
        chat_ids = {
            m.chat_id for m in self._members.values()
            if m.user_id == user_id and m.is_active
        }
        chats = [
            c.model_copy(deep=True) for c in self._chats.values()
            if c.id in chat_ids and c.is_active
        ]
        chats.sort(key=lambda c: c.updated_at or c.created_at, reverse=True)
        return chats

    # =========================================================================
    # Members
    # =========================================================================

    def _ensure_no_other_active(self, member: ChatMember) -> None:
        if not member.is_active:
            return
        for other in self._members.values():
            if (
                other.id != member.id
                and other.is_active
                and other.chat_id == member.chat_id
                and other.user_id == member.user_id
            ):
                raise UserAlreadyMemberError(member.user_id, member.chat_id)

    async def add_member(self, member: ChatMember) -> None:
        async with self._lock:
            self._ensure_no_other_active(member)
            self._members[member.id] = member.model_copy(deep=True)

    async def update_member(self, member: ChatMember) -> None:
        async with self._lock:
            self._ensure_no_other_active(member)
            self._members[member.id] = member.model_copy(deep=True)

    async def reactivate_member(self, member: ChatMember) -> None:
        async with self._lock:
            stored = self._members.get(member.id)
            if stored is not None and stored.is_active:
                raise UserAlreadyMemberError(member.user_id, member.chat_id)
            self._ensure_no_other_active(member)
            self._members[member.id] = member.model_copy(deep=True)

    async def get_member_by_chat_and_user(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        for member in self._members.values():
            if member.chat_id == chat_id and member.user_id == user_id and member.is_active:
                return member.model_copy(deep=True)
        return None

    async def get_latest_member(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        rows = [
            m for m in self._members.values()
            if m.chat_id == chat_id and m.user_id == user_id
        ]
        if not rows:
            return None
        latest = max(rows, key=lambda m: (m.is_active, m.joined_at))
        return latest.model_copy(deep=True)

    async def get_chat_members(self, chat_id: uuid.UUID) -> List[ChatMember]:
        members = [
            m.model_copy(deep=True) for m in self._members.values()
            if m.chat_id == chat_id and m.is_active
        ]
        members.sort(key=lambda m: m.joined_at)
        return members

    async def is_user_member(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.get_member_by_chat_and_user(chat_id, user_id) is not None

    async def all_members(self, chat_id: uuid.UUID) -> List[ChatMember]:
        """Every membership row of a chat, active or not"""
        return [m.model_copy(deep=True) for m in self._members.values() if m.chat_id == chat_id]

    # =========================================================================
    # Messages
    # =========================================================================

    async def add_message(self, message: ChatMessage) -> None:
        self._messages[message.id] = message.model_copy(deep=True)

    async def edit_message(self, message: ChatMessage) -> None:
        async with self._lock:
            stored = self._live_message(message.id, "edit")
            stored.content = message.content
            stored.edited_at = message.edited_at

    async def delete_message(self, message_id: uuid.UUID) -> None:
        async with self._lock:
            self._live_message(message_id, "delete").is_deleted = True

    def _live_message(self, message_id: uuid.UUID, action: str) -> ChatMessage:
        stored = self._messages.get(message_id)
        if stored is None or stored.is_deleted:
            raise MessageDeletedError(message_id, action)
        return stored

    async def get_message(self, message_id: uuid.UUID) -> Optional[ChatMessage]:
        message = self._messages.get(message_id)
        return message.model_copy(deep=True) if message else None

    async def get_chat_messages(
        self,
        chat_id: uuid.UUID,
        skip: int = 0,
        take: int = 50,
    ) -> List[ChatMessage]:
        # Insertion order breaks sent_at ties so the newest write comes first
        indexed = [
            (seq, m) for seq, m in enumerate(self._messages.values())
            if m.chat_id == chat_id and not m.is_deleted
        ]
        indexed.sort(key=lambda pair: (pair[1].sent_at, pair[0]), reverse=True)
        return [m.model_copy(deep=True) for _, m in indexed[skip:skip + take]]

    async def get_chat_message_count(self, chat_id: uuid.UUID) -> int:
        return sum(
            1 for m in self._messages.values()
            if m.chat_id == chat_id and not m.is_deleted
        )
