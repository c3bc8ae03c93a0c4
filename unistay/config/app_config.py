# =============================================================================
# File: unistay/config/app_config.py
# Description: HTTP application settings
# =============================================================================

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from unistay.common.base.base_config import BaseConfig, BASE_CONFIG_DICT


class AppConfig(BaseConfig):
    """Application settings (APP_ prefix)"""

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='APP_',
    )

    title: str = Field(default="UniStay Chat API")
    debug: bool = Field(default=False)
    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    return AppConfig()


def reset_app_config() -> None:
    get_app_config.cache_clear()
