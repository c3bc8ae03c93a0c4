# =============================================================================
# File: unistay/chat/queries.py
# Description: Chat domain queries
# =============================================================================

from __future__ import annotations

from pydantic import Field
import uuid

from unistay.infra.cqrs.query_bus import Query

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class GetChatByIdQuery(Query):
    """Chat details with members, visible to active members only"""
    chat_id: uuid.UUID
    user_id: uuid.UUID


class GetUserChatsQuery(Query):
    """Active chats the user is an active member of"""
    user_id: uuid.UUID


class GetChatMembersQuery(Query):
    """Active members of a chat"""
    chat_id: uuid.UUID
    user_id: uuid.UUID


class GetChatMessagesQuery(Query):
    """Messages from a chat, newest first (paginated)"""
    chat_id: uuid.UUID
    user_id: uuid.UUID
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class IsUserMemberQuery(Query):
    """Check if user is an active member of chat"""
    chat_id: uuid.UUID
    user_id: uuid.UUID
