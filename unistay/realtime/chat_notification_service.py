# =============================================================================
# File: unistay/realtime/chat_notification_service.py
# Description: Fan-out of chat changes to the chat's room
# =============================================================================

"""
ChatNotificationService

Called by command handlers after a change is persisted. Each method
re-reads what it announces from the store, so clients always get the
stored state with user details attached, then broadcasts it to the
chat's room.

A notification failure is logged and swallowed: the change it describes
is already committed. Cancellation is not swallowed.

Broadcasts for one chat go out in call order, but nothing serializes
concurrent calls for the same room, so two racing notifications may
reach clients in either order.
"""

import logging
import uuid
from typing import Any, Dict

from unistay.chat.entities import ChatMessage
from unistay.chat.projections import ChatProjector
from unistay.chat.ports.chat_store_port import ChatStorePort
from unistay.chat.ports.user_directory_port import UserDirectoryPort
from unistay.realtime.events import ClientEvent, build_event, room_name
from unistay.realtime.room_bus import RoomBus

log = logging.getLogger("unistay.realtime.notifications")


class ChatNotificationService:

    def __init__(
            self,
            room_bus: RoomBus,
            chat_store: ChatStorePort,
            user_directory: UserDirectoryPort,
            room_prefix: str = "chat_",
    ):
        self.room_bus = room_bus
        self.projector = ChatProjector(chat_store, user_directory)
        self.room_prefix = room_prefix

    def room_for(self, chat_id: uuid.UUID) -> str:
        return room_name(chat_id, self.room_prefix)

    async def _broadcast(self, chat_id: uuid.UUID, event: Dict[str, Any]) -> None:
        await self.room_bus.broadcast(self.room_for(chat_id), event)

    async def notify_new_message(self, message: ChatMessage) -> None:
        try:
            view = await self.projector.message_view(message.id)
            if view is None:
                log.warning(f"Message {message.id} vanished before notification")
                return
            await self._broadcast(message.chat_id, build_event(ClientEvent.RECEIVE_MESSAGE, view))
        except Exception as e:
            log.error(f"Failed to notify new message {message.id}: {e}", exc_info=True)

    async def notify_message_edited(self, message: ChatMessage) -> None:
        try:
            view = await self.projector.message_view(message.id)
            if view is None:
                log.warning(f"Message {message.id} vanished before notification")
                return
            await self._broadcast(message.chat_id, build_event(ClientEvent.MESSAGE_EDITED, view))
        except Exception as e:
            log.error(f"Failed to notify edited message {message.id}: {e}", exc_info=True)

    async def notify_message_deleted(self, chat_id: uuid.UUID, message_id: uuid.UUID) -> None:
        try:
            payload = {"chat_id": str(chat_id), "message_id": str(message_id)}
            await self._broadcast(chat_id, build_event(ClientEvent.MESSAGE_DELETED, payload))
        except Exception as e:
            log.error(f"Failed to notify deleted message {message_id}: {e}", exc_info=True)

    async def notify_user_joined(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        try:
            member = await self.projector.member_view(chat_id, user_id)
            if member is None:
                log.warning(f"Member {user_id} of chat {chat_id} not found for notification")
                return
            payload = {"chat_id": str(chat_id), "member": member.model_dump(mode="json")}
            await self._broadcast(chat_id, build_event(ClientEvent.USER_JOINED, payload))
        except Exception as e:
            log.error(f"Failed to notify user {user_id} joined chat {chat_id}: {e}", exc_info=True)

    async def notify_user_left(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        try:
            payload = {"chat_id": str(chat_id), "user_id": str(user_id)}
            await self._broadcast(chat_id, build_event(ClientEvent.USER_LEFT, payload))
        except Exception as e:
            log.error(f"Failed to notify user {user_id} left chat {chat_id}: {e}", exc_info=True)
