# =============================================================================
# File: unistay/realtime/room_bus.py
# Description: Room-scoped broadcast over local sockets, optionally via Redis
# =============================================================================

"""
RoomBus - room subscriptions and broadcast

    ChatNotificationService / ChatGateway
                  |
          RoomBus.broadcast(room, event)
                  |
    InMemoryRoomBus: deliver to local subscribers
    RedisRoomBus:    PUBLISH to the room channel
                       -> every instance subscribed to the channel
                       -> deliver to its local subscribers

Delivery is best-effort. A failing socket is logged and skipped so the
rest of the room still gets the event.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Set

from unistay.realtime.connection import ChatConnection
from unistay.realtime.events import dumps

log = logging.getLogger("unistay.realtime.room_bus")


class RoomBus(ABC):
    """Connection registry plus room membership for this process"""

    def __init__(self):
        self.connections: Dict[str, ChatConnection] = {}
        self.rooms: Dict[str, Set[str]] = {}

    # =========================================================================
    # Connections
    # =========================================================================

    async def register(self, connection: ChatConnection) -> None:
        self.connections[connection.conn_id] = connection
        log.debug(f"Connection {connection.conn_id} registered for user {connection.user_id}")

    async def unregister(self, conn_id: str) -> None:
        """Drop the connection and every room subscription it held"""
        await self.unsubscribe_all(conn_id)
        self.connections.pop(conn_id, None)
        log.debug(f"Connection {conn_id} unregistered")

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def subscribe(self, conn_id: str, room: str) -> None:
        connection = self.connections.get(conn_id)
        if connection is None:
            raise KeyError(f"Unknown connection {conn_id}")
        members = self.rooms.setdefault(room, set())
        first_local = not members
        members.add(conn_id)
        connection.rooms.add(room)
        if first_local:
            await self._on_room_opened(room)
        log.debug(f"Connection {conn_id} subscribed to {room}")

    async def unsubscribe(self, conn_id: str, room: str) -> None:
        members = self.rooms.get(room)
        if members is None or conn_id not in members:
            return
        members.discard(conn_id)
        connection = self.connections.get(conn_id)
        if connection is not None:
            connection.rooms.discard(room)
        if not members:
            del self.rooms[room]
            await self._on_room_closed(room)
        log.debug(f"Connection {conn_id} unsubscribed from {room}")

    async def unsubscribe_all(self, conn_id: str) -> None:
        connection = self.connections.get(conn_id)
        rooms = set(connection.rooms) if connection else {
            room for room, members in self.rooms.items() if conn_id in members
        }
        for room in rooms:
            await self.unsubscribe(conn_id, room)

    def subscribers(self, room: str) -> Set[str]:
        return set(self.rooms.get(room, ()))

    # =========================================================================
    # Delivery
    # =========================================================================

    @abstractmethod
    async def broadcast(self, room: str, event: Dict[str, Any], exclude: Optional[str] = None) -> None:
        """Send event to every subscriber of room except ``exclude``"""
        pass

    async def deliver_local(self, room: str, event: Dict[str, Any], exclude: Optional[str] = None) -> int:
        """Send to subscribers connected to this process; returns sent count"""
        targets = [
            self.connections[conn_id]
            for conn_id in self.subscribers(room)
            if conn_id != exclude and conn_id in self.connections
        ]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(conn.send_event(event) for conn in targets),
            return_exceptions=True,
        )
        sent = 0
        for conn, result in zip(targets, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                log.warning(f"Failed to deliver {event.get('t')} to {conn.conn_id} in {room}: {result}")
            else:
                sent += 1
        return sent

    async def _on_room_opened(self, room: str) -> None:
        """First local subscriber joined room"""

    async def _on_room_closed(self, room: str) -> None:
        """Last local subscriber left room"""

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        self.connections.clear()
        self.rooms.clear()


class InMemoryRoomBus(RoomBus):
    """Single-process bus: broadcast is local delivery"""

    async def broadcast(self, room: str, event: Dict[str, Any], exclude: Optional[str] = None) -> None:
        sent = await self.deliver_local(room, event, exclude)
        log.debug(f"Broadcast {event.get('t')} to {room}: {sent} recipients")


class RedisRoomBus(RoomBus):
    """
    Multi-instance bus over Redis Pub/Sub, one channel per room.

    An instance subscribes to a room channel while at least one of its
    local connections is in the room. Messages carry the sender's
    connection id so the excluded connection is skipped on whichever
    instance owns it.
    """

    def __init__(self, redis_client: Any, channel_prefix: str = "unistay:room:"):
        super().__init__()
        if not redis_client:
            raise ValueError("redis_client is required")
        self.redis_client = redis_client
        self.channel_prefix = channel_prefix
        self.pubsub: Optional[Any] = None
        self._listener_task: Optional[asyncio.Task] = None
        self._running = False

    def _channel(self, room: str) -> str:
        return f"{self.channel_prefix}{room}"

    async def start(self) -> None:
        await self.redis_client.ping()
        self.pubsub = self.redis_client.pubsub(ignore_subscribe_messages=True)
        self._running = True
        self._listener_task = asyncio.create_task(self._listen_loop())
        log.info("Redis room bus started")

    async def close(self) -> None:
        self._running = False
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
        if self.pubsub is not None:
            await self.pubsub.aclose()
            self.pubsub = None
        await super().close()
        log.info("Redis room bus closed")

    async def broadcast(self, room: str, event: Dict[str, Any], exclude: Optional[str] = None) -> None:
        message = dumps({"room": room, "exclude": exclude, "event": event})
        receivers = await self.redis_client.publish(self._channel(room), message)
        log.debug(f"Published {event.get('t')} to {room} ({receivers} instances)")

    async def _on_room_opened(self, room: str) -> None:
        await self.pubsub.subscribe(self._channel(room))

    async def _on_room_closed(self, room: str) -> None:
        await self.pubsub.unsubscribe(self._channel(room))

    async def _listen_loop(self) -> None:
        log.info("Redis room listener started")
        while self._running:
            # get_message needs at least one subscription
            if not self.pubsub.subscribed:
                await asyncio.sleep(0.2)
                continue
            try:
                message = await self.pubsub.get_message(timeout=1.0)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Redis room listener error: {e}", exc_info=True)
                await asyncio.sleep(1.0)
                continue

            if message and message.get("type") == "message":
                await self._process_message(message)

    async def _process_message(self, message: Dict[str, Any]) -> None:
        data = message["data"]
        data = data.decode("utf-8") if isinstance(data, bytes) else data
        try:
            envelope = json.loads(data)
        except json.JSONDecodeError as e:
            log.error(f"Failed to deserialize room message: {e}")
            return
        await self.deliver_local(envelope["room"], envelope["event"], envelope.get("exclude"))
