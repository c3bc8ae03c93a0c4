# =============================================================================
# File: unistay/core/startup/services.py
# Description: Notification fan-out, socket gateway and CQRS handler wiring
# =============================================================================

import logging
from typing import Optional

from unistay.core.fastapi_types import FastAPI
from unistay.config.chat_config import ChatConfig, get_chat_config
from unistay.chat.ports.chat_store_port import ChatStorePort
from unistay.chat.ports.user_directory_port import UserDirectoryPort
from unistay.infra.cqrs.command_bus import CommandBus
from unistay.infra.cqrs.query_bus import QueryBus
from unistay.infra.cqrs.handler_dependencies import HandlerDependencies
from unistay.infra.cqrs.decorators import auto_register_all_handlers, get_registered_handlers
from unistay.realtime.chat_gateway import ChatGateway
from unistay.realtime.chat_notification_service import ChatNotificationService
from unistay.realtime.room_bus import RoomBus

# Importing the handler packages registers them with the decorators
import unistay.chat.command_handlers  # noqa: F401
import unistay.chat.query_handlers  # noqa: F401

logger = logging.getLogger("unistay.startup.services")


def initialize_chat_services(
        app: FastAPI,
        chat_store: ChatStorePort,
        user_directory: UserDirectoryPort,
        room_bus: RoomBus,
        chat_config: Optional[ChatConfig] = None,
) -> None:
    """
    Build the notifier, gateway and buses on top of the given adapters.

    Lifespan calls this with the configured backends; tests call it with
    the in-memory store and room bus.
    """
    chat_config = chat_config or get_chat_config()

    app.state.chat_config = chat_config
    app.state.chat_store = chat_store
    app.state.user_directory = user_directory
    app.state.room_bus = room_bus

    app.state.chat_notifier = ChatNotificationService(
        room_bus,
        chat_store,
        user_directory,
        room_prefix=chat_config.room_prefix,
    )
    app.state.chat_gateway = ChatGateway(room_bus, chat_store, room_prefix=chat_config.room_prefix)

    app.state.command_bus = CommandBus()
    app.state.query_bus = QueryBus()

    deps = HandlerDependencies(
        chat_store=chat_store,
        user_directory=user_directory,
        chat_notifier=app.state.chat_notifier,
    )
    app.state.cqrs_registration_stats = auto_register_all_handlers(
        app.state.command_bus, app.state.query_bus, deps
    )

    discovered = get_registered_handlers()
    logger.info(
        f"Chat services ready: {len(discovered['commands'])} commands, "
        f"{len(discovered['queries'])} queries"
    )
