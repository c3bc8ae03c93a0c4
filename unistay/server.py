# =============================================================================
# File: unistay/server.py
# Description: Main FastAPI application entry point
# =============================================================================

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv

from unistay import __version__
from unistay.core.fastapi_types import FastAPI
from unistay.core.lifespan import lifespan
from unistay.core.middleware import setup_middleware
from unistay.core.routes import setup_routes
from unistay.core.exceptions import setup_exception_handlers
from unistay.config.app_config import get_app_config
from unistay.config.logging_config import setup_logging

load_dotenv()

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================
setup_logging(service_name="api")

logger = logging.getLogger("unistay.server")


# =============================================================================
# FASTAPI APP
# =============================================================================
def create_app() -> FastAPI:
    """Build the application; the lifespan wires storage and buses on startup"""
    app_config = get_app_config()

    application = FastAPI(
        title=app_config.title,
        version=__version__,
        debug=app_config.debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    setup_middleware(application)
    setup_routes(application)
    setup_exception_handlers(application)
    return application


app = create_app()

__all__ = ["app", "create_app", "__version__"]

# =============================================================================
# Development entry point
# =============================================================================
if __name__ == "__main__":
    import subprocess

    port = os.getenv("PORT", "5001")
    host = os.getenv("HOST", "0.0.0.0")
    reload = os.getenv("RELOAD", "true").lower() == "true"

    logger.info(f"Starting UniStay Chat API on {host}:{port} (reload={reload})")

    cmd = [
        "granian",
        "--interface", "asgi",
        "unistay.server:app",
        "--host", host,
        "--port", str(port),
    ]

    if reload:
        cmd.extend(["--reload", "--reload-paths", "unistay/"])

    subprocess.run(cmd)
