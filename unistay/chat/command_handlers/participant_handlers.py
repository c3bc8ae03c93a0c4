# =============================================================================
# File: unistay/chat/command_handlers/participant_handlers.py
# Description: Command handlers for membership operations
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from unistay.chat.commands import AddMemberCommand, LeaveChatCommand
from unistay.chat.entities import ChatMember
from unistay.chat.enums import MANAGER_ROLES
from unistay.chat.exceptions import ChatOperationFailedError, UserAlreadyMemberError
from unistay.chat.access import load_chat, require_member, require_role
from unistay.infra.cqrs.decorators import command_handler
from unistay.common.base.base_command_handler import BaseCommandHandler

if TYPE_CHECKING:
    from unistay.infra.cqrs.handler_dependencies import HandlerDependencies

log = logging.getLogger("unistay.chat.handlers.participant")


@command_handler(AddMemberCommand)
class AddMemberHandler(BaseCommandHandler[AddMemberCommand, ChatMember]):
    """
    Handle AddMemberCommand.

    A user who left earlier gets their old membership row reactivated,
    so a (chat, user) pair never accumulates rows.
    """

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: AddMemberCommand) -> ChatMember:
        log.info(
            f"Adding {command.target_user_id} to chat {command.chat_id} "
            f"as {command.role.value} by {command.requestor_id}"
        )

        chat = await load_chat(self.chat_store, command.chat_id)
        requestor = await require_member(self.chat_store, chat.id, command.requestor_id)
        require_role(requestor, MANAGER_ROLES, "add members")

        target = await self.user_directory.get_by_id(command.target_user_id)
        if target is None:
            raise ChatOperationFailedError(
                chat.id,
                "add member",
                f"User {command.target_user_id} was not found.",
            )

        existing = await self.chat_store.get_latest_member(chat.id, command.target_user_id)
        if existing is not None and existing.is_active:
            raise UserAlreadyMemberError(command.target_user_id, chat.id)

        if existing is not None:
            existing.rejoin(command.role)
            # Store rejects the write if a concurrent add got there first
            await self.chat_store.reactivate_member(existing)
            member = existing
            log.info(f"Membership {member.id} reactivated in chat {chat.id}")
        else:
            member = ChatMember(
                chat_id=chat.id,
                user_id=command.target_user_id,
                role=command.role,
            )
            await self.chat_store.add_member(member)
            log.info(f"Member {member.user_id} added to chat {chat.id}")

        if self.notifier:
            await self.notifier.notify_user_joined(chat.id, member.user_id)
        return member

    def operation_failed(self, command: AddMemberCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "add member")


@command_handler(LeaveChatCommand)
class LeaveChatHandler(BaseCommandHandler[LeaveChatCommand, ChatMember]):
    """
    Handle LeaveChatCommand.

    Any role may leave. Ownership is not handed over, so a chat whose
    only Owner leaves has no Owner afterwards.
    """

    def __init__(self, deps: 'HandlerDependencies'):
        super().__init__(deps)

    async def execute(self, command: LeaveChatCommand) -> ChatMember:
        log.info(f"User {command.user_id} leaving chat {command.chat_id}")

        chat = await load_chat(self.chat_store, command.chat_id)
        member = await require_member(self.chat_store, chat.id, command.user_id)

        member.leave()
        await self.chat_store.update_member(member)

        log.info(f"User {command.user_id} left chat {chat.id}")

        if self.notifier:
            await self.notifier.notify_user_left(chat.id, member.user_id)
        return member

    def operation_failed(self, command: LeaveChatCommand) -> ChatOperationFailedError:
        return ChatOperationFailedError(command.chat_id, "leave chat")
