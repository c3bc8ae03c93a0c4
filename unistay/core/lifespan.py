# =============================================================================
# File: unistay/core/lifespan.py
# Description: Application lifespan management (startup/shutdown)
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

from unistay import __version__
from unistay.core.fastapi_types import FastAPI
from unistay.core.app_state import AppState
from unistay.core.startup.infrastructure import initialize_storage, initialize_room_bus
from unistay.core.startup.services import initialize_chat_services
from unistay.core.shutdown import shutdown_all_services

logger = logging.getLogger("unistay.lifespan")


# =============================================================================
# LIFESPAN (Startup/Shutdown)
# =============================================================================
@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Application lifespan manager with structured initialization"""

    logger.info(f"UniStay Chat {__version__} starting up...")

    app_instance.state = AppState()

    try:
        # Phase 1: Storage
        logger.info("Phase 1: Initializing chat store...")
        await initialize_storage(app_instance)

        # Phase 2: Realtime transport
        logger.info("Phase 2: Initializing room bus...")
        await initialize_room_bus(app_instance)

        # Phase 3: Notifier, gateway, CQRS handlers
        logger.info("Phase 3: Initializing chat services...")
        initialize_chat_services(
            app_instance,
            app_instance.state.chat_store,
            app_instance.state.user_directory,
            app_instance.state.room_bus,
            app_instance.state.chat_config,
        )

        logger.info("=" * 60)
        logger.info(f"UniStay Chat v{__version__} ready to serve requests")
        logger.info("=" * 60)

        yield

    except Exception as startup_error:
        logger.error(f"Critical error during startup: {startup_error}", exc_info=True)
        raise

    finally:
        logger.info(f"UniStay Chat v{__version__} shutting down...")
        try:
            async with asyncio.timeout(30.0):
                await shutdown_all_services(app_instance)
            logger.info(f"UniStay Chat v{__version__} stopped gracefully")
        except TimeoutError:
            logger.error("Shutdown timed out after 30s, forcing exit")
