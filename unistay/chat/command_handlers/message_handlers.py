# =============================================================================
# File: unistay/chat/command_handlers/message_handlers.py
# Description: Command handlers for message operations
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from unistay.chat.commands import (
    SendMessageCommand,
    EditMessageCommand,
    DeleteMessageCommand,
)
from unistay.chat.entities import ChatMessage
from unistay.chat.exceptions import (
    ChatOperationFailedError,
    ChatMessageOperationFailedError,
    MessageDeletedError,
)
from unistay.chat.access import (
    load_chat,
    ensure_active,
    require_member,
    load_message_in_chat,
    require_sender,
)
from unistay.infra.cqrs.decorators import command_handler
from unistay.common.base.base_command_handler import BaseCommandHandler

if TYPE_CHECKING:
    from unistay.infra.cqrs.handler_dependencies import HandlerDependencies

log = logging.getLogger("unistay.chat.handlers.message")


@command_handler(SendMessageCommand)
class SendMessageHandler(BaseCommandHandler[SendMessageCommand, ChatMessage]):
    """Handle SendMessageCommand. Any active member may post."""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: SendMessageCommand) -> ChatMessage:
        log.debug(f"Sending message to chat {command.chat_id} from {command.sender_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        ensure_active(chat)
        await require_member(self.chat_store, chat.id, command.sender_id)

        message = ChatMessage(
            chat_id=chat.id,
            sender_id=command.sender_id,
            content=command.content,
        )
        await self.chat_store.add_message(message)

        log.info(f"Message {message.id} sent to chat {chat.id}")

        if self.notifier:
            await self.notifier.notify_new_message(message)
        return message

    def operation_failed(self, command: SendMessageCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "send message")


@command_handler(EditMessageCommand)
class EditMessageHandler(BaseCommandHandler[EditMessageCommand, ChatMessage]):
    """Handle EditMessageCommand. Only the sender may edit, whatever their role."""

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: EditMessageCommand) -> ChatMessage:
        log.info(f"Editing message {command.message_id} in chat {command.chat_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        message = await load_message_in_chat(
            self.chat_store, chat.id, command.message_id, "edit message"
        )
        member = await require_member(self.chat_store, chat.id, command.requesting_user_id)
        require_sender(member, message, "edit this message")

        try:
            message.edit_content(command.content)
            # Conditional write: a delete that committed after our read wins
            await self.chat_store.edit_message(message)
        except MessageDeletedError as e:
            raise ChatMessageOperationFailedError(message.id, "edit message", str(e)) from e

        log.info(f"Message {message.id} edited")

        if self.notifier:
            await self.notifier.notify_message_edited(message)
        return message

    def operation_failed(self, command: EditMessageCommand) -> ChatMessageOperationFailedError:
        return ChatMessageOperationFailedError(command.message_id, "edit message")


@command_handler(DeleteMessageCommand)
class DeleteMessageHandler(BaseCommandHandler[DeleteMessageCommand, ChatMessage]):
    """
    Handle DeleteMessageCommand.

    Soft delete: content stays in the store but the message drops out of
    listings. A second delete is rejected and changes nothing.
    """

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: DeleteMessageCommand) -> ChatMessage:
        log.info(f"Deleting message {command.message_id} in chat {command.chat_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        message = await load_message_in_chat(
            self.chat_store, chat.id, command.message_id, "delete message"
        )
        member = await require_member(self.chat_store, chat.id, command.requesting_user_id)
        require_sender(member, message, "delete this message")

        try:
            message.delete()
            await self.chat_store.delete_message(message.id)
        except MessageDeletedError as e:
            raise ChatMessageOperationFailedError(message.id, "delete message", str(e)) from e

        log.info(f"Message {message.id} deleted")

        if self.notifier:
            await self.notifier.notify_message_deleted(chat.id, message.id)
        return message

    def operation_failed(self, command: DeleteMessageCommand) -> ChatMessageOperationFailedError:
        return ChatMessageOperationFailedError(command.message_id, "delete message")
