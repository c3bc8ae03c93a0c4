# =============================================================================
# File: unistay/core/app_state.py
# Description: Application state definition and global state management
# =============================================================================

from typing import Optional, Dict, Any
from datetime import datetime, timezone

from unistay.chat.ports.chat_store_port import ChatStorePort
from unistay.chat.ports.user_directory_port import UserDirectoryPort
from unistay.config.chat_config import ChatConfig
from unistay.infra.cqrs.command_bus import CommandBus
from unistay.infra.cqrs.query_bus import QueryBus
from unistay.realtime.chat_gateway import ChatGateway
from unistay.realtime.chat_notification_service import ChatNotificationService
from unistay.realtime.room_bus import RoomBus


# =============================================================================
# APP STATE TYPE DEFINITION
# =============================================================================
class AppState:
    """Type definition for FastAPI app.state with proper type hints"""

    def __init__(self):
        # Configuration
        self.chat_config: Optional[ChatConfig] = None

        # Storage
        self.chat_store: Optional[ChatStorePort] = None
        self.user_directory: Optional[UserDirectoryPort] = None
        self.pg_pool_ready: bool = False

        # Realtime
        self.redis_client = None  # redis.asyncio.Redis when the redis room bus is used
        self.room_bus: Optional[RoomBus] = None
        self.chat_notifier: Optional[ChatNotificationService] = None
        self.chat_gateway: Optional[ChatGateway] = None

        # CQRS components
        self.command_bus: Optional[CommandBus] = None
        self.query_bus: Optional[QueryBus] = None

        # CQRS registration statistics
        self.cqrs_registration_stats: Optional[Dict[str, Any]] = None


# =============================================================================
# GLOBAL STATE
# =============================================================================
_START_TIME = datetime.now(timezone.utc)


def get_start_time() -> datetime:
    """Get application start time"""
    return _START_TIME
