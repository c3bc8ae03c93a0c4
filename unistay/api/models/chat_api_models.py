# =============================================================================
#  File: unistay/api/models/chat_api_models.py
#  UniStay API Models - Chat Domain
# =============================================================================
#  Request bodies for the chat endpoints. Responses are the read models in
#  unistay.chat.read_models and the entities in unistay.chat.entities.
# =============================================================================

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from unistay.chat.enums import ChatType, ChatMemberRole
from unistay.chat.commands import (
    CHAT_NAME_MAX_LENGTH,
    CHAT_DESCRIPTION_MAX_LENGTH,
    MESSAGE_CONTENT_MAX_LENGTH,
)


# =============================================================================
#  CHAT
# =============================================================================

class CreateChatRequest(BaseModel):
    """Request to create a new chat. The caller becomes its Owner."""
    name: str = Field(..., max_length=CHAT_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=CHAT_DESCRIPTION_MAX_LENGTH)
    chat_type: ChatType = ChatType.GROUP


class UpdateChatRequest(BaseModel):
    """Request to update chat details"""
    name: str = Field(..., max_length=CHAT_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=CHAT_DESCRIPTION_MAX_LENGTH)


# =============================================================================
#  MEMBERS
# =============================================================================

class AddMemberRequest(BaseModel):
    """Request to add a user to a chat"""
    user_id: UUID
    role: ChatMemberRole = Field(default=ChatMemberRole.MEMBER, description="member, admin, or owner")


# =============================================================================
#  MESSAGES
# =============================================================================

class SendMessageRequest(BaseModel):
    content: str = Field(..., max_length=MESSAGE_CONTENT_MAX_LENGTH)


class EditMessageRequest(BaseModel):
    content: str = Field(..., max_length=MESSAGE_CONTENT_MAX_LENGTH)
