# =============================================================================
# File: unistay/chat/ports/chat_notifier_port.py
# Description: Port interface for real-time chat notifications
# =============================================================================

from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from unistay.chat.entities import ChatMessage


@runtime_checkable
class ChatNotifierPort(Protocol):
    """
    Port: Chat Notifier

    Implemented by ChatNotificationService (unistay/realtime/).
    Implementations never raise for delivery failures; command handlers
    call them after the change is persisted and ignore the outcome.
    """

    async def notify_new_message(self, message: ChatMessage) -> None:
        ...

    async def notify_message_edited(self, message: ChatMessage) -> None:
        ...

    async def notify_message_deleted(self, chat_id: uuid.UUID, message_id: uuid.UUID) -> None:
        ...

    async def notify_user_joined(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        ...

    async def notify_user_left(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        ...
