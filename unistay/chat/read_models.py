# =============================================================================
# File: unistay/chat/read_models.py
# Description: Chat projections returned by queries and pushed to clients
# =============================================================================

from __future__ import annotations

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, computed_field
import uuid
from datetime import datetime

from unistay.chat.enums import ChatType, ChatMemberRole
from unistay.chat.entities import Chat, ChatMember, ChatMessage


class UserSummary(BaseModel):
    """Read-only view of a user from the user directory"""
    id: uuid.UUID
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or str(self.id)


class ChatMemberView(BaseModel):
    """Member with user details"""
    id: uuid.UUID
    chat_id: uuid.UUID
    user_id: uuid.UUID
    role: ChatMemberRole
    joined_at: datetime
    left_at: Optional[datetime] = None
    is_active: bool = True
    user: Optional[UserSummary] = None

    @classmethod
    def build(cls, member: ChatMember, user: Optional[UserSummary]) -> ChatMemberView:
        return cls(**member.model_dump(), user=user)


class ChatMessageView(BaseModel):
    """Message with sender details"""
    id: uuid.UUID
    chat_id: uuid.UUID
    sender_id: uuid.UUID
    content: str
    sent_at: datetime
    edited_at: Optional[datetime] = None
    is_deleted: bool = False
    sender: Optional[UserSummary] = None

    @computed_field
    @property
    def is_edited(self) -> bool:
        return self.edited_at is not None

    @classmethod
    def build(cls, message: ChatMessage, sender: Optional[UserSummary]) -> ChatMessageView:
        return cls(**message.model_dump(), sender=sender)


class ChatView(BaseModel):
    """Chat with its active members"""
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    chat_type: ChatType
    created_by: uuid.UUID
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_active: bool = True
    creator: Optional[UserSummary] = None
    members: List[ChatMemberView] = Field(default_factory=list)

    @computed_field
    @property
    def member_count(self) -> int:
        return len(self.members)

    @computed_field
    @property
    def admins(self) -> List[ChatMemberView]:
        return [m for m in self.members if m.role == ChatMemberRole.ADMIN]

    @computed_field
    @property
    def owners(self) -> List[ChatMemberView]:
        return [m for m in self.members if m.role == ChatMemberRole.OWNER]

    @classmethod
    def build(
            cls,
            chat: Chat,
            creator: Optional[UserSummary],
            members: List[ChatMemberView],
    ) -> ChatView:
        return cls(**chat.model_dump(), creator=creator, members=members)
