# =============================================================================
# File: unistay/core/startup/infrastructure.py
# Description: Storage and room bus initialization (PostgreSQL, Redis)
# =============================================================================

import logging

import redis.asyncio as redis

from unistay.core.fastapi_types import FastAPI
from unistay.config.chat_config import get_chat_config, StoreBackend, RoomBusBackend
from unistay.config.pg_client_config import get_postgres_config
from unistay.config.redis_config import get_redis_config
from unistay.infra.persistence.pg_client import init_db_pool, run_schema_from_file
from unistay.infra.repos.pg_chat_store import PostgresChatStore
from unistay.infra.repos.memory_chat_store import InMemoryChatStore
from unistay.infra.repos.user_directory import PostgresUserDirectory, InMemoryUserDirectory
from unistay.realtime.room_bus import InMemoryRoomBus, RedisRoomBus

logger = logging.getLogger("unistay.startup.infrastructure")


async def initialize_storage(app: FastAPI) -> None:
    """Chat store and user directory for the configured backend"""
    chat_config = get_chat_config()
    app.state.chat_config = chat_config

    if chat_config.store_backend == StoreBackend.MEMORY:
        app.state.chat_store = InMemoryChatStore()
        app.state.user_directory = InMemoryUserDirectory()
        logger.warning("Using in-memory chat store; data is lost on restart")
        return

    await init_db_pool()
    app.state.pg_pool_ready = True
    logger.info("PostgreSQL pool initialized.")

    if get_postgres_config().run_schema_on_startup:
        await run_schema_from_file()

    app.state.chat_store = PostgresChatStore()
    app.state.user_directory = PostgresUserDirectory()
    logger.info("PostgreSQL chat store ready")


async def initialize_room_bus(app: FastAPI) -> None:
    """Room bus for the configured backend, started"""
    chat_config = app.state.chat_config or get_chat_config()

    if chat_config.room_bus_backend == RoomBusBackend.REDIS:
        redis_config = get_redis_config()
        app.state.redis_client = redis.from_url(
            redis_config.url,
            decode_responses=True,
            health_check_interval=redis_config.health_check_interval,
            socket_timeout=redis_config.socket_timeout,
        )
        room_bus = RedisRoomBus(app.state.redis_client, channel_prefix=redis_config.channel_prefix)
    else:
        room_bus = InMemoryRoomBus()

    await room_bus.start()
    app.state.room_bus = room_bus
    logger.info(f"Room bus initialized ({chat_config.room_bus_backend.value})")
