# =============================================================================
# File: unistay/core/health.py
# Description: Health check endpoints for the application
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from unistay import __version__
from unistay.core.fastapi_types import FastAPI
from unistay.core.app_state import get_start_time
from unistay.infra.persistence import pg_client

logger = logging.getLogger("unistay.health")


def register_health_endpoints(app: FastAPI) -> None:
    """Register health check endpoints directly on the app"""

    @app.get("/health", tags=["System"])
    async def health_check() -> Dict[str, Any]:
        """Liveness plus the state of the chat components"""
        return await get_health_status(app)


async def get_health_status(app: FastAPI) -> Dict[str, Any]:
    state = app.state
    now = datetime.now(timezone.utc)
    room_bus = getattr(state, "room_bus", None)
    command_bus = getattr(state, "command_bus", None)
    query_bus = getattr(state, "query_bus", None)

    health_data: Dict[str, Any] = {
        "status": "healthy",
        "version": __version__,
        "timestamp": now.isoformat(),
        "uptime_sec": round((now - get_start_time()).total_seconds(), 1),
        "cqrs": {
            "command_bus": "enabled" if command_bus else "disabled",
            "query_bus": "enabled" if query_bus else "disabled",
            "handlers_registered": command_bus.get_handler_info()["total_handlers"] if command_bus else 0,
            "query_handlers_registered": query_bus.get_handler_info()["total_handlers"] if query_bus else 0,
        },
        "realtime": {
            "room_bus": type(room_bus).__name__ if room_bus else None,
            "connections": len(room_bus.connections) if room_bus else 0,
            "rooms": len(room_bus.rooms) if room_bus else 0,
        },
    }

    if getattr(state, 'pg_pool_ready', False):
        health_data["postgres"] = await pg_client.health_check()
        if health_data["postgres"]["status"] != "healthy":
            health_data["status"] = "degraded"

    return health_data
