# =============================================================================
# File: unistay/core/middleware.py
# Description: Middleware configuration for FastAPI application
# =============================================================================

import logging

from fastapi.middleware.cors import CORSMiddleware

from unistay.core.fastapi_types import FastAPI
from unistay.config.app_config import get_app_config

logger = logging.getLogger("unistay.middleware")


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application"""
    setup_cors(app)


def setup_cors(app: FastAPI) -> None:
    """Configure CORS middleware"""
    allowed_origins = [origin.strip() for origin in get_app_config().cors_origins]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    logger.info(f"CORS configured with allowed origins: {allowed_origins}")
