# unistay/config/logging_config.py
# =============================================================================
# File: unistay/config/logging_config.py
# Description: Logging configuration using Rich framework
# =============================================================================

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from unistay.common.base.base_config import BaseConfig, BASE_CONFIG_DICT


class LoggingConfig(BaseConfig):
    """Logging settings (LOG_ prefix)"""

    model_config = SettingsConfigDict(
        **BASE_CONFIG_DICT,
        env_prefix='LOG_',
    )

    level: str = Field(default="INFO", description="Root log level")
    json_format: bool = Field(default=False, description="Emit one JSON object per line")
    file: Optional[str] = Field(default=None, description="Optional rotating log file")
    max_size_mb: int = Field(default=100)
    backup_count: int = Field(default=5)
    rich_tracebacks: bool = Field(default=True)
    force_color: bool = Field(default=False)

    # Third-party loggers pinned to WARNING unless overridden via LOGLEVEL_<NAME>
    quiet_loggers: List[str] = Field(default_factory=lambda: [
        "asyncio",
        "asyncpg",
        "redis",
        "httpx",
        "httpcore",
        "websockets",
        "uvicorn.access",
        "multipart",
    ])


@lru_cache(maxsize=1)
def get_logging_config() -> LoggingConfig:
    return LoggingConfig()


UNISTAY_THEME = Theme({
    "logging.level.debug": "magenta dim",
    "logging.level.info": "green",
    "logging.level.warning": "dark_goldenrod",
    "logging.level.error": "red",
    "logging.level.critical": "bold red",
    "log.time": "grey70",
})

PLAIN_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)-40s] %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ProductionFormatter(logging.Formatter):
    """JSON formatter for production environments"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for extra in ("user_id", "chat_id", "request_id", "correlation_id"):
            if hasattr(record, extra):
                log_obj[extra] = str(getattr(record, extra))

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def get_logger_level_from_env(logger_name: str, default_level: int) -> int:
    """
    Per-logger override, e.g. "unistay.realtime" -> LOGLEVEL_UNISTAY_REALTIME.
    """
    env_name = f"LOGLEVEL_{logger_name.replace('.', '_').upper()}"
    level_str = os.getenv(env_name, '').upper()
    level_map: Dict[str, int] = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'WARN': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }
    return level_map.get(level_str, default_level)


def setup_logging(
        service_name: str = "unistay",
        log_level: Optional[str] = None,
        config: Optional[LoggingConfig] = None,
) -> None:
    """
    Configure logging with Rich when attached to a terminal, JSON when
    LOG_JSON_FORMAT is set, and plain lines otherwise.

    Args:
        service_name: Name of the service, used for the startup logger
        log_level: Override log level
        config: Explicit config, defaults to the cached environment config
    """
    config = config or get_logging_config()
    level = (log_level or config.level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    use_rich = not config.json_format and (sys.stdout.isatty() or config.force_color)

    if use_rich:
        console = Console(theme=UNISTAY_THEME, force_terminal=config.force_color)
        root_logger.addHandler(RichHandler(
            console=console,
            rich_tracebacks=config.rich_tracebacks,
            show_path=False,
            markup=False,
        ))
    elif config.json_format:
        json_handler = logging.StreamHandler(sys.stdout)
        json_handler.setFormatter(ProductionFormatter())
        root_logger.addHandler(json_handler)
    else:
        plain_handler = logging.StreamHandler(sys.stdout)
        plain_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT))
        root_logger.addHandler(plain_handler)

    if config.file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT))
        root_logger.addHandler(file_handler)

    for logger_name in config.quiet_loggers:
        logging.getLogger(logger_name).setLevel(
            get_logger_level_from_env(logger_name, logging.WARNING)
        )

    logging.getLogger(f"{service_name}.startup").info(
        f"Logging configured for {service_name} service"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
