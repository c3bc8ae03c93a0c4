# =============================================================================
# File: unistay/chat/entities.py
# Description: Chat domain entities (Chat, ChatMember, ChatMessage)
# =============================================================================

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone
import uuid

from unistay.chat.enums import ChatType, ChatMemberRole, MANAGER_ROLES
from unistay.chat.exceptions import MessageDeletedError, MemberInactiveError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Chat
# =============================================================================

class Chat(BaseModel):
    """
    A chat room.

    Members and messages reference the chat by id; the entity itself
    holds no collections.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    description: Optional[str] = None
    chat_type: ChatType = ChatType.GROUP
    created_by: uuid.UUID
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    is_active: bool = True

    def update_details(self, name: str, description: Optional[str]) -> None:
        self.name = name
        self.description = description
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = utc_now()


# =============================================================================
# ChatMember
# =============================================================================

class ChatMember(BaseModel):
    """
    Join record between a chat and a user.

    Lifecycle: active on create -> inactive on leave -> active again on rejoin.
    The same row is reused on rejoin so a (chat, user) pair never has more
    than one row.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    chat_id: uuid.UUID
    user_id: uuid.UUID
    role: ChatMemberRole = ChatMemberRole.MEMBER
    joined_at: datetime = Field(default_factory=utc_now)
    left_at: Optional[datetime] = None
    is_active: bool = True

    @property
    def can_manage(self) -> bool:
        """Owner and Admin may update the chat and add members"""
        return self.is_active and self.role in MANAGER_ROLES

    @property
    def is_owner(self) -> bool:
        return self.is_active and self.role == ChatMemberRole.OWNER

    def leave(self) -> None:
        if not self.is_active:
            raise MemberInactiveError(self.id)
        self.is_active = False
        self.left_at = utc_now()

    def rejoin(self, role: ChatMemberRole = ChatMemberRole.MEMBER) -> None:
        self.is_active = True
        self.role = role
        self.joined_at = utc_now()
        self.left_at = None

    def change_role(self, role: ChatMemberRole) -> None:
        if not self.is_active:
            raise MemberInactiveError(self.id)
        self.role = role


# =============================================================================
# ChatMessage
# =============================================================================

class ChatMessage(BaseModel):
    """
    A single chat message.

    Sent -> [Edited]* -> Deleted. Deleted is terminal: content is kept
    for audit but the message can no longer be edited or deleted.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    chat_id: uuid.UUID
    sender_id: uuid.UUID
    content: str
    sent_at: datetime = Field(default_factory=utc_now)
    edited_at: Optional[datetime] = None
    is_deleted: bool = False

    def is_sent_by(self, user_id: uuid.UUID) -> bool:
        return self.sender_id == user_id

    def edit_content(self, content: str) -> None:
        if self.is_deleted:
            raise MessageDeletedError(self.id, "edit")
        self.content = content
        self.edited_at = utc_now()

    def delete(self) -> None:
        if self.is_deleted:
            raise MessageDeletedError(self.id, "delete")
        self.is_deleted = True
