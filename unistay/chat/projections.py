# =============================================================================
# File: unistay/chat/projections.py
# Description: Builds read views by joining store rows with user summaries
# =============================================================================

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Optional

from unistay.chat.entities import Chat, ChatMember, ChatMessage
from unistay.chat.read_models import (
    UserSummary,
    ChatView,
    ChatMemberView,
    ChatMessageView,
)
from unistay.chat.ports.chat_store_port import ChatStorePort
from unistay.chat.ports.user_directory_port import UserDirectoryPort


class ChatProjector:
    """
    Resolves entities into views with user details.

    Used both by query handlers and by the notification service, which
    re-reads entities before broadcasting them.
    """

    def __init__(self, chat_store: ChatStorePort, user_directory: UserDirectoryPort):
        self.chat_store = chat_store
        self.user_directory = user_directory

    async def _users(self, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Optional[UserSummary]]:
        users: Dict[uuid.UUID, Optional[UserSummary]] = {}
        for user_id in user_ids:
            if user_id not in users:
                users[user_id] = await self.user_directory.get_by_id(user_id)
        return users

    async def member_views(self, members: List[ChatMember]) -> List[ChatMemberView]:
        users = await self._users(m.user_id for m in members)
        return [ChatMemberView.build(m, users[m.user_id]) for m in members]

    async def message_views(self, messages: List[ChatMessage]) -> List[ChatMessageView]:
        users = await self._users(m.sender_id for m in messages)
        return [ChatMessageView.build(m, users[m.sender_id]) for m in messages]

    async def chat_view(self, chat: Chat) -> ChatView:
        members = await self.chat_store.get_chat_members(chat.id)
        member_views = await self.member_views(members)
        creator = await self.user_directory.get_by_id(chat.created_by)
        return ChatView.build(chat, creator, member_views)

    async def message_view(self, message_id: uuid.UUID) -> Optional[ChatMessageView]:
        message = await self.chat_store.get_message(message_id)
        if message is None:
            return None
        sender = await self.user_directory.get_by_id(message.sender_id)
        return ChatMessageView.build(message, sender)

    async def member_view(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> Optional[ChatMemberView]:
        member = await self.chat_store.get_latest_member(chat_id, user_id)
        if member is None:
            return None
        user = await self.user_directory.get_by_id(user_id)
        return ChatMemberView.build(member, user)
