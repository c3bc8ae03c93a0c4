# =============================================================================
# File: unistay/config/chat_config.py
# Description: Chat store and realtime fan-out settings
# =============================================================================

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from unistay.common.base.base_config import BaseConfig, BASE_CONFIG_DICT


class StoreBackend(str, Enum):
    POSTGRES = "postgres"
    MEMORY = "memory"


class RoomBusBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class ChatConfig(BaseConfig):
    """Chat settings (CHAT_ prefix)"""

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='CHAT_',
    )

    store_backend: StoreBackend = Field(default=StoreBackend.POSTGRES)
    room_bus_backend: RoomBusBackend = Field(
        default=RoomBusBackend.MEMORY,
        description="memory for a single instance, redis when several instances serve sockets"
    )
    room_prefix: str = Field(default="chat_", description="Room name is prefix + chat id")
    ws_send_timeout_sec: float = Field(default=5.0, description="Per-socket send timeout during fan-out")


@lru_cache(maxsize=1)
def get_chat_config() -> ChatConfig:
    return ChatConfig()


def reset_chat_config() -> None:
    get_chat_config.cache_clear()
