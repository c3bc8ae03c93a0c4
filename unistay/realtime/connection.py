# =============================================================================
# File: unistay/realtime/connection.py
# Description: One authenticated client socket
# =============================================================================

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Set

from starlette.websockets import WebSocket, WebSocketState

from unistay.realtime.events import dumps

log = logging.getLogger("unistay.realtime.connection")


class ChatConnection:
    """
    Wraps a WebSocket with the identity decoded from its token.

    The room bus delivers events through ``send_event``; rooms the
    connection joined are tracked here so they can be dropped on
    disconnect.
    """

    def __init__(
            self,
            websocket: WebSocket,
            user_id: uuid.UUID,
            user_name: str = "",
            send_timeout: float = 5.0,
    ):
        self.conn_id: str = uuid.uuid4().hex
        self.websocket = websocket
        self.user_id = user_id
        self.user_name = user_name or str(user_id)
        self.rooms: Set[str] = set()
        self._send_timeout = send_timeout
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self.websocket.application_state == WebSocketState.CONNECTED

    async def send_event(self, event: Dict[str, Any]) -> None:
        """Serialize and send; sends on one socket never interleave"""
        if not self.is_open:
            return
        text = dumps(event)
        async with self._send_lock:
            await asyncio.wait_for(self.websocket.send_text(text), timeout=self._send_timeout)

    async def send_error(self, message: str, code: str, details: Optional[str] = None) -> None:
        """Send an error message to client with standard format"""
        log.info(f"Sending error to {self.conn_id}: {code} - {message}")
        await self.send_event({
            "t": "error",
            "p": {
                "message": message,
                "code": code,
                "details": details,
                "connection_id": self.conn_id,
            },
        })
