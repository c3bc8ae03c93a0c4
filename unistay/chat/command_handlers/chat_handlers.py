# =============================================================================
# File: unistay/chat/command_handlers/chat_handlers.py
# Description: Command handlers for chat lifecycle operations
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from unistay.chat.commands import (
    CreateChatCommand,
    UpdateChatCommand,
    DeactivateChatCommand,
)
from unistay.chat.entities import Chat, ChatMember
from unistay.chat.enums import ChatMemberRole, MANAGER_ROLES
from unistay.chat.exceptions import ChatOperationFailedError
from unistay.chat.access import load_chat, require_member, require_role
from unistay.infra.cqrs.decorators import command_handler
from unistay.common.base.base_command_handler import BaseCommandHandler

if TYPE_CHECKING:
    from unistay.infra.cqrs.handler_dependencies import HandlerDependencies

log = logging.getLogger("unistay.chat.handlers.chat")


@command_handler(CreateChatCommand)
class CreateChatHandler(BaseCommandHandler[CreateChatCommand, Chat]):
    """Handle CreateChatCommand"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: CreateChatCommand) -> Chat:
        log.info(f"Creating chat {command.chat_id} '{command.name}' for {command.creator_id}")

        creator = await self.user_directory.get_by_id(command.creator_id)
        if creator is None:
            raise ChatOperationFailedError(
                command.chat_id,
                "create chat",
                f"Creator {command.creator_id} was not found.",
            )

        chat = Chat(
            id=command.chat_id,
            name=command.name,
            description=command.description,
            chat_type=command.chat_type,
            created_by=command.creator_id,
        )
        owner = ChatMember(
            chat_id=chat.id,
            user_id=command.creator_id,
            role=ChatMemberRole.OWNER,
            joined_at=chat.created_at,
        )

        # Chat row and owner row commit together or not at all
        await self.chat_store.create_chat_with_owner(chat, owner)

        log.info(f"Chat created: {chat.id}")
        return chat

    def operation_failed(self, command: CreateChatCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "create chat")


@command_handler(UpdateChatCommand)
class UpdateChatHandler(BaseCommandHandler[UpdateChatCommand, Chat]):
    """Handle UpdateChatCommand"""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: UpdateChatCommand) -> Chat:
        log.info(f"Updating chat {command.chat_id} by {command.requestor_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        requestor = await require_member(self.chat_store, chat.id, command.requestor_id)
        require_role(requestor, MANAGER_ROLES, "update chat")

        chat.update_details(command.name, command.description)
        await self.chat_store.update_chat(chat)

        log.info(f"Chat updated: {chat.id}")
        return chat

    def operation_failed(self, command: UpdateChatCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "update chat")


@command_handler(DeactivateChatCommand)
class DeactivateChatHandler(BaseCommandHandler[DeactivateChatCommand, Chat]):
    """Handle DeactivateChatCommand. Messages and members are kept."""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: DeactivateChatCommand) -> Chat:
        log.info(f"Deactivating chat {command.chat_id} by {command.requestor_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        requestor = await require_member(self.chat_store, chat.id, command.requestor_id)
        require_role(requestor, {ChatMemberRole.OWNER}, "delete chat")

        chat.deactivate()
        await self.chat_store.update_chat(chat)

        log.info(f"Chat deactivated: {chat.id}")
        return chat

    def operation_failed(self, command: DeactivateChatCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "delete chat")
