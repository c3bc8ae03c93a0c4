# =============================================================================
# File: unistay/core/shutdown.py
# Description: Graceful shutdown logic for all services
# =============================================================================

import asyncio
import logging

from unistay.core.fastapi_types import FastAPI
from unistay.infra.persistence.pg_client import close_db_pool

logger = logging.getLogger("unistay.shutdown")


async def shutdown_all_services(app: FastAPI) -> None:
    """Shutdown in reverse order of startup"""

    # Phase 1: Stop realtime fan-out (drops every socket's subscriptions)
    room_bus = getattr(app.state, 'room_bus', None)
    if room_bus is not None:
        try:
            async with asyncio.timeout(10.0):
                await room_bus.close()
            logger.info("Room bus closed")
        except TimeoutError:
            logger.error("Room bus close timed out after 10s, continuing...")

    redis_client = getattr(app.state, 'redis_client', None)
    if redis_client is not None:
        await redis_client.aclose()
        logger.info("Redis client closed")

    # Phase 2: Close database connections
    if getattr(app.state, 'pg_pool_ready', False):
        await close_db_pool()
        app.state.pg_pool_ready = False
