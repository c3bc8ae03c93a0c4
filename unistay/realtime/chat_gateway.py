# =============================================================================
# File: unistay/realtime/chat_gateway.py
# Description: Client calls over the chat socket (join/leave rooms, typing)
# =============================================================================

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from unistay.chat.ports.chat_store_port import ChatStorePort
from unistay.realtime.connection import ChatConnection
from unistay.realtime.events import ClientEvent, build_event, room_name
from unistay.realtime.room_bus import RoomBus

log = logging.getLogger("unistay.realtime.gateway")


class GatewayError(Exception):
    """Client call rejected; reported to the caller as an error frame"""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class ChatGateway:
    """
    Routes incoming socket messages ``{"t": call, "p": payload}``.

    Joining a room checks active membership and the chat active flag on every
    call. Leaving a room only drops the subscription. Typing indicators
    are relayed to the room without any store access.
    """

    def __init__(self, room_bus: RoomBus, chat_store: ChatStorePort, room_prefix: str = "chat_"):
        self.room_bus = room_bus
        self.chat_store = chat_store
        self.room_prefix = room_prefix

        self.handlers: Dict[str, Callable[[ChatConnection, Dict[str, Any]], Awaitable[None]]] = {
            'JoinChat': self.handle_join_chat,
            'LeaveChat': self.handle_leave_chat,
            'NotifyTyping': self.handle_notify_typing,
            'NotifyStoppedTyping': self.handle_notify_stopped_typing,
            'ping': self.handle_ping,
        }

    async def handle_message(self, connection: ChatConnection, message_data: Dict[str, Any]) -> None:
        """Route message to appropriate handler"""
        if not isinstance(message_data, dict):
            await connection.send_error("Message must be a JSON object", "BAD_MESSAGE")
            return

        msg_type = message_data.get('t') or message_data.get('type')
        payload = message_data.get('p') or message_data.get('payload') or {}

        handler = self.handlers.get(msg_type)
        if handler is None:
            log.warning(f"Unknown message type from {connection.conn_id}: {msg_type}")
            await connection.send_error(f"Unknown message type: {msg_type}", "UNKNOWN_TYPE")
            return

        try:
            await handler(connection, payload)
        except GatewayError as e:
            await connection.send_error(str(e), e.code)

    def _chat_id(self, payload: Dict[str, Any]) -> uuid.UUID:
        raw: Optional[str] = payload.get('chat_id') if isinstance(payload, dict) else None
        try:
            return uuid.UUID(str(raw))
        except ValueError:
            raise GatewayError(f"Invalid chat_id: {raw}", "BAD_CHAT_ID")

    # =========================================================================
    # Calls
    # =========================================================================

    async def join_chat(self, connection: ChatConnection, chat_id: uuid.UUID) -> None:
        # Never trust an earlier join: membership may have ended since
        if not await self.chat_store.is_user_member(chat_id, connection.user_id):
            log.info(f"User {connection.user_id} denied joining chat {chat_id}")
            raise GatewayError(
                f"User {connection.user_id} is not a member of chat {chat_id}.",
                "NOT_MEMBER",
            )
        chat = await self.chat_store.get_chat(chat_id)
        if chat is None or not chat.is_active:
            raise GatewayError(f"Chat {chat_id} is not active.", "CHAT_INACTIVE")
        await self.room_bus.subscribe(connection.conn_id, room_name(chat_id, self.room_prefix))
        log.info(f"User {connection.user_id} joined room of chat {chat_id}")

    async def leave_chat(self, connection: ChatConnection, chat_id: uuid.UUID) -> None:
        await self.room_bus.unsubscribe(connection.conn_id, room_name(chat_id, self.room_prefix))
        log.info(f"User {connection.user_id} left room of chat {chat_id}")

    async def notify_typing(self, connection: ChatConnection, chat_id: uuid.UUID) -> None:
        event = build_event(ClientEvent.USER_TYPING, {
            "chat_id": str(chat_id),
            "user_id": str(connection.user_id),
            "user_name": connection.user_name,
        })
        await self.room_bus.broadcast(
            room_name(chat_id, self.room_prefix), event, exclude=connection.conn_id
        )

    async def notify_stopped_typing(self, connection: ChatConnection, chat_id: uuid.UUID) -> None:
        event = build_event(ClientEvent.USER_STOPPED_TYPING, {
            "chat_id": str(chat_id),
            "user_id": str(connection.user_id),
        })
        await self.room_bus.broadcast(
            room_name(chat_id, self.room_prefix), event, exclude=connection.conn_id
        )

    # =========================================================================
    # Message handlers
    # =========================================================================

    async def handle_join_chat(self, connection: ChatConnection, payload: Dict[str, Any]) -> None:
        chat_id = self._chat_id(payload)
        await self.join_chat(connection, chat_id)
        await connection.send_event(build_event("JoinedChat", {"chat_id": str(chat_id)}))

    async def handle_leave_chat(self, connection: ChatConnection, payload: Dict[str, Any]) -> None:
        chat_id = self._chat_id(payload)
        await self.leave_chat(connection, chat_id)
        await connection.send_event(build_event("LeftChat", {"chat_id": str(chat_id)}))

    async def handle_notify_typing(self, connection: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.notify_typing(connection, self._chat_id(payload))

    async def handle_notify_stopped_typing(self, connection: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.notify_stopped_typing(connection, self._chat_id(payload))

    async def handle_ping(self, connection: ChatConnection, payload: Dict[str, Any]) -> None:
        await connection.send_event(build_event("pong", payload if isinstance(payload, dict) else {}))
