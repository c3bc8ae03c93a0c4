# =============================================================================
# File: unistay/realtime/events.py
# Description: Client event envelope and JSON encoding for realtime delivery
# =============================================================================

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict
from uuid import UUID

from pydantic import BaseModel


class ClientEvent(str, Enum):
    """Events pushed from server to chat clients"""
    RECEIVE_MESSAGE = "ReceiveMessage"
    MESSAGE_EDITED = "MessageEdited"
    MESSAGE_DELETED = "MessageDeleted"
    USER_JOINED = "UserJoined"
    USER_LEFT = "UserLeft"
    USER_TYPING = "UserTyping"
    USER_STOPPED_TYPING = "UserStoppedTyping"


class RealtimeJSONEncoder(json.JSONEncoder):
    """JSON encoder for realtime events that handles UUID, datetime, Decimal, models"""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Decimal):
            return str(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def build_event(event_type: str, payload: Any) -> Dict[str, Any]:
    """Envelope: {"t": type, "p": payload, "ts": iso timestamp}"""
    if isinstance(event_type, Enum):
        event_type = event_type.value
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    return {
        "t": event_type,
        "p": payload,
        "ts": datetime.now(timezone.utc).isoformat(),
    }


def dumps(event: Dict[str, Any]) -> str:
    return json.dumps(event, cls=RealtimeJSONEncoder)


def room_name(chat_id: UUID, prefix: str = "chat_") -> str:
    """Room for a chat; one room per chat, stable for the chat's lifetime"""
    return f"{prefix}{chat_id}"
