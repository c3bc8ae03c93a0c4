# =============================================================================
# File: unistay/chat/commands.py
# Description: Chat domain commands
# =============================================================================

from __future__ import annotations

from typing import Optional
from pydantic import Field, field_validator
from uuid import UUID, uuid4

from unistay.infra.cqrs.command_bus import Command
from unistay.chat.enums import ChatType, ChatMemberRole

CHAT_NAME_MAX_LENGTH = 100
CHAT_DESCRIPTION_MAX_LENGTH = 500
MESSAGE_CONTENT_MAX_LENGTH = 2000


def _not_blank(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field_name} is required")
    return value


# =============================================================================
# Chat Lifecycle Commands
# =============================================================================

class CreateChatCommand(Command):
    """Create a new chat with its creator as Owner"""
    # Allocated up front so failures can be correlated before the insert
    chat_id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., max_length=CHAT_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=CHAT_DESCRIPTION_MAX_LENGTH)
    chat_type: ChatType = ChatType.GROUP
    creator_id: UUID

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _not_blank(v, "Chat name")


class UpdateChatCommand(Command):
    """Update chat name and description (Owner or Admin)"""
    chat_id: UUID
    requestor_id: UUID
    name: str = Field(..., max_length=CHAT_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=CHAT_DESCRIPTION_MAX_LENGTH)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _not_blank(v, "Chat name")


class DeactivateChatCommand(Command):
    """Soft delete a chat (Owner only)"""
    chat_id: UUID
    requestor_id: UUID


# =============================================================================
# Membership Commands
# =============================================================================

class AddMemberCommand(Command):
    """Add a user to a chat (Owner or Admin)"""
    chat_id: UUID
    requestor_id: UUID
    target_user_id: UUID
    role: ChatMemberRole = ChatMemberRole.MEMBER


class LeaveChatCommand(Command):
    """Leave a chat"""
    chat_id: UUID
    user_id: UUID


# =============================================================================
# Message Commands
# =============================================================================

class SendMessageCommand(Command):
    """Post a message to a chat"""
    chat_id: UUID
    sender_id: UUID
    content: str = Field(..., max_length=MESSAGE_CONTENT_MAX_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _not_blank(v, "Message content")


class EditMessageCommand(Command):
    """Replace the content of one's own message"""
    chat_id: UUID
    message_id: UUID
    requesting_user_id: UUID
    content: str = Field(..., max_length=MESSAGE_CONTENT_MAX_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _not_blank(v, "Message content")


class DeleteMessageCommand(Command):
    """Soft delete one's own message"""
    chat_id: UUID
    message_id: UUID
    requesting_user_id: UUID
