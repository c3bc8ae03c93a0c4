# =============================================================================
# File: unistay/core/routes.py
# Description: Route registration for FastAPI application
# =============================================================================

import logging

from unistay.core.fastapi_types import FastAPI
from unistay.config.app_config import get_app_config
from unistay.api.routers.chat_router import router as chat_router
from unistay.api.routers.realtime_router import router as realtime_router
from unistay.core.health import register_health_endpoints

logger = logging.getLogger("unistay.routes")


def setup_routes(app: FastAPI) -> None:
    """Register all routers with the FastAPI application"""

    app.include_router(chat_router, prefix=get_app_config().api_prefix, tags=["Chat"])
    app.include_router(realtime_router, tags=["Realtime"])
    register_health_endpoints(app)

    logger.info("Routers registered")
