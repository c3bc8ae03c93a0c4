# =============================================================================
# File: unistay/chat/query_handlers/chat_query_handlers.py
# Description: Query handlers for chat reads
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from unistay.infra.cqrs.decorators import query_handler
from unistay.common.base.base_query_handler import BaseQueryHandler
from unistay.common.exceptions.exceptions import OperationFailedError
from unistay.chat.access import load_chat, require_member
from unistay.chat.exceptions import ChatNotFoundError, ChatOperationFailedError
from unistay.chat.projections import ChatProjector
from unistay.chat.queries import (
    GetChatByIdQuery,
    GetUserChatsQuery,
    GetChatMembersQuery,
    GetChatMessagesQuery,
    IsUserMemberQuery,
)
from unistay.chat.read_models import ChatView, ChatMemberView, ChatMessageView

if TYPE_CHECKING:
    from unistay.infra.cqrs.handler_dependencies import HandlerDependencies

log = logging.getLogger("unistay.chat.query_handlers")


@query_handler(GetChatByIdQuery)
class GetChatByIdQueryHandler(BaseQueryHandler[GetChatByIdQuery, ChatView]):
    """Get chat details by ID"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)
        self.projector = ChatProjector(self.chat_store, self.user_directory)

    async def fetch(self, query: GetChatByIdQuery) -> ChatView:
        chat = await load_chat(self.chat_store, query.chat_id)
        # Deactivated chats are hidden like missing ones
        if not chat.is_active:
            raise ChatNotFoundError(chat.id)
        await require_member(self.chat_store, chat.id, query.user_id)
        return await self.projector.chat_view(chat)

    def operation_failed(self, query: GetChatByIdQuery) -> ChatOperationFailedError:
        return ChatOperationFailedError(query.chat_id, "get chat")


@query_handler(GetUserChatsQuery)
class GetUserChatsQueryHandler(BaseQueryHandler[GetUserChatsQuery, List[ChatView]]):
    """Get all chats for a user, most recently active first"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)
        self.projector = ChatProjector(self.chat_store, self.user_directory)

    async def fetch(self, query: GetUserChatsQuery) -> List[ChatView]:
        chats = await self.chat_store.get_user_chats(query.user_id)
        return [await self.projector.chat_view(chat) for chat in chats]

    def operation_failed(self, query: GetUserChatsQuery) -> OperationFailedError:
        return OperationFailedError(f"Failed to list chats for user {query.user_id}.")


@query_handler(GetChatMembersQuery)
class GetChatMembersQueryHandler(BaseQueryHandler[GetChatMembersQuery, List[ChatMemberView]]):
    """Get active members of a chat"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)
        self.projector = ChatProjector(self.chat_store, self.user_directory)

    async def fetch(self, query: GetChatMembersQuery) -> List[ChatMemberView]:
        chat = await load_chat(self.chat_store, query.chat_id)
        await require_member(self.chat_store, chat.id, query.user_id)
        members = await self.chat_store.get_chat_members(chat.id)
        return await self.projector.member_views(members)

    def operation_failed(self, query: GetChatMembersQuery) -> ChatOperationFailedError:
        return ChatOperationFailedError(query.chat_id, "get members")


@query_handler(GetChatMessagesQuery)
class GetChatMessagesQueryHandler(BaseQueryHandler[GetChatMessagesQuery, List[ChatMessageView]]):
    """Get messages from a chat, newest first, deleted ones excluded"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)
        self.projector = ChatProjector(self.chat_store, self.user_directory)

    async def fetch(self, query: GetChatMessagesQuery) -> List[ChatMessageView]:
        chat = await load_chat(self.chat_store, query.chat_id)
        await require_member(self.chat_store, chat.id, query.user_id)
        messages = await self.chat_store.get_chat_messages(chat.id, query.skip, query.take)
        return await self.projector.message_views(messages)

    def operation_failed(self, query: GetChatMessagesQuery) -> ChatOperationFailedError:
        return ChatOperationFailedError(query.chat_id, "get messages")


@query_handler(IsUserMemberQuery)
class IsUserMemberQueryHandler(BaseQueryHandler[IsUserMemberQuery, bool]):
    """Check if user is an active member of chat"""

    async def fetch(self, query: IsUserMemberQuery) -> bool:
        return await self.chat_store.is_user_member(query.chat_id, query.user_id)

    def operation_failed(self, query: IsUserMemberQuery) -> ChatOperationFailedError:
        return ChatOperationFailedError(query.chat_id, "check membership")
