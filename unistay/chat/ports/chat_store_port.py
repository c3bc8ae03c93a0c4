# =============================================================================
# File: unistay/chat/ports/chat_store_port.py
# Description: Port interface for chat persistence
# Pattern: Hexagonal Architecture / Ports & Adapters
# =============================================================================

from __future__ import annotations

import uuid
from typing import Protocol, Optional, List, runtime_checkable

from unistay.chat.entities import Chat, ChatMember, ChatMessage


@runtime_checkable
class ChatStorePort(Protocol):
    """
    Port: Chat Store

    Defined by: Chat Domain
    Implemented by:
    - PostgresChatStore (unistay/infra/repos/pg_chat_store.py)
    - InMemoryChatStore (unistay/infra/repos/memory_chat_store.py)

    Every method is an await point. Implementations raise
    InfrastructureError (or the driver's own error) on I/O failure and
    UserAlreadyMemberError when a second active membership for the same
    (chat, user) pair would be written.
    """

    # =========================================================================
    # Chats
    # =========================================================================

    async def get_chat(self, chat_id: uuid.UUID) -> Optional[Chat]:
        """Get chat by id regardless of its active flag"""
        ...

    async def create_chat_with_owner(self, chat: Chat, owner: ChatMember) -> None:
        """Insert the chat and its owner membership in one transaction"""
        ...

    async def update_chat(self, chat: Chat) -> None:
        ...

    async def get_user_chats(self, user_id: uuid.UUID) -> List[Chat]:
        """Active chats where the user is an active member, newest activity first"""
        ...

    # =========================================================================
    # Members
    # =========================================================================

    async def add_member(self, member: ChatMember) -> None:
        """Insert a membership; rejects a second active row for (chat, user)"""
        ...

    async def update_member(self, member: ChatMember) -> None:
        ...

    async def reactivate_member(self, member: ChatMember) -> None:
        """
        Persist a rejoin of a previously inactive membership.

        Raises UserAlreadyMemberError if the row became active meanwhile
        or another active row exists for the same (chat, user).
        """
        ...

    async def get_member_by_chat_and_user(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        """Active membership for (chat, user), if any"""
        ...

    async def get_latest_member(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        """Most recent membership for (chat, user) in any state"""
        ...

    async def get_chat_members(self, chat_id: uuid.UUID) -> List[ChatMember]:
        """Active members ordered by joined_at"""
        ...

    async def is_user_member(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        ...

    # =========================================================================
    # Messages
    # =========================================================================

    async def add_message(self, message: ChatMessage) -> None:
        ...

    async def edit_message(self, message: ChatMessage) -> None:
        """
        Write new content and edited_at of a message that is not deleted.

        Raises MessageDeletedError if the message was deleted meanwhile;
        the stored row is left unchanged.
        """
        ...

    async def delete_message(self, message_id: uuid.UUID) -> None:
        """Set the deleted flag; raises MessageDeletedError if already set"""
        ...

    async def get_message(self, message_id: uuid.UUID) -> Optional[ChatMessage]:
        """Get message by id, deleted or not"""
        ...

    async def get_chat_messages(
        self,
        chat_id: uuid.UUID,
        skip: int = 0,
        take: int = 50,
    ) -> List[ChatMessage]:
        """Non-deleted messages, newest first"""
        ...

    async def get_chat_message_count(self, chat_id: uuid.UUID) -> int:
        """Count of non-deleted messages"""
        ...
