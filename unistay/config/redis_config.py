# =============================================================================
# File: unistay/config/redis_config.py
# Description: Redis configuration for cross-instance room fan-out
# =============================================================================

from functools import lru_cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from unistay.common.base.base_config import BaseConfig, BASE_CONFIG_DICT


class RedisConfig(BaseConfig):
    """Redis settings (REDIS_ prefix)"""

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='REDIS_',
    )

    url: str = Field(default="redis://localhost:6379/0")
    channel_prefix: str = Field(default="unistay:room:", description="Pub/Sub channel per room")
    health_check_interval: int = Field(default=30)
    socket_timeout: float = Field(default=5.0)


@lru_cache(maxsize=1)
def get_redis_config() -> RedisConfig:
    return RedisConfig()


def reset_redis_config() -> None:
    get_redis_config.cache_clear()
