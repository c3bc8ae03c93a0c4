# =============================================================================
# File: unistay/api/routers/realtime_router.py
# Description: Chat WebSocket endpoint
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from unistay.common.exceptions.exceptions import UniStayException
from unistay.core.exceptions import GENERIC_ERROR_MESSAGE
from unistay.realtime.connection import ChatConnection
from unistay.security.jwt_auth import get_websocket_token, get_user_id_from_token, WS_UNAUTHORIZED

log = logging.getLogger("unistay.api.realtime")

router = APIRouter()


@router.websocket("/ws/chat")
async def chat_websocket(
        websocket: WebSocket,
        token: Optional[str] = Query(None),
):
    """
    Chat socket.

    Clients send ``{"t": "JoinChat", "p": {"chat_id": ...}}`` style calls and
    receive ``{"t": event, "p": payload, "ts": ...}`` frames for the rooms
    they joined.
    """
    await websocket.accept()

    user_id = get_user_id_from_token(get_websocket_token(websocket, token) or "")
    if user_id is None:
        client_ip = websocket.client.host if websocket.client else "unknown"
        log.warning(f"WebSocket authentication failed from {client_ip}")
        await websocket.close(code=WS_UNAUTHORIZED, reason="Authentication required")
        return

    state = websocket.app.state
    room_bus = state.room_bus
    gateway = state.chat_gateway

    user = await state.user_directory.get_by_id(user_id)
    connection = ChatConnection(
        websocket,
        user_id,
        user_name=user.display_name if user else "",
        send_timeout=state.chat_config.ws_send_timeout_sec,
    )
    await room_bus.register(connection)
    log.info(f"WebSocket {connection.conn_id} connected for user {user_id}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                log.info(f"WebSocket {connection.conn_id} disconnect message received")
                break

            # Text and binary frames both carry UTF-8 JSON
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""

            try:
                message = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                await connection.send_error("Message must be valid JSON", "BAD_MESSAGE")
                continue

            try:
                await gateway.handle_message(connection, message)
            except UniStayException as e:
                log.error(f"WebSocket {connection.conn_id} call failed: {e}", exc_info=True)
                await connection.send_error(GENERIC_ERROR_MESSAGE, e.code)
            except Exception as e:
                log.error(f"WebSocket {connection.conn_id} error: {e}", exc_info=True)
                await connection.send_error(GENERIC_ERROR_MESSAGE, "INTERNAL_ERROR")

    except WebSocketDisconnect:
        log.info(f"WebSocket {connection.conn_id} disconnected")

    finally:
        await room_bus.unregister(connection.conn_id)
        if websocket.client_state != WebSocketState.DISCONNECTED:
            await websocket.close(code=1000, reason="Normal closure")
