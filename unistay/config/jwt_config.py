# =============================================================================
# File: unistay/config/jwt_config.py - JWT Configuration Management
# =============================================================================

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from unistay.common.base.base_config import BaseConfig, BASE_CONFIG_DICT


class JWTConfig(BaseConfig):
    """
    JWT verification settings. Tokens are issued by the accounts service;
    this service only decodes them.
    """

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='JWT_',
    )

    secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="JWT secret key shared with the issuer"
    )
    algorithm: str = Field(default="HS256")
    issuer: Optional[str] = Field(default=None, description="Expected iss claim, unchecked when empty")
    audience: Optional[str] = Field(default=None, description="Expected aud claim, unchecked when empty")
    user_id_claim: str = Field(default="sub")


@lru_cache(maxsize=1)
def get_jwt_config() -> JWTConfig:
    return JWTConfig()


def reset_jwt_config() -> None:
    get_jwt_config.cache_clear()
