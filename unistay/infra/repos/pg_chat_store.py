# =============================================================================
# File: unistay/infra/repos/pg_chat_store.py
# Description: PostgreSQL implementation of ChatStorePort
# =============================================================================

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional, List

import asyncpg

from unistay.infra.persistence import pg_client
from unistay.chat.entities import Chat, ChatMember, ChatMessage
from unistay.chat.exceptions import UserAlreadyMemberError, MessageDeletedError
from unistay.common.exceptions.exceptions import InfrastructureError

log = logging.getLogger("unistay.chat.pg_store")

ACTIVE_MEMBER_INDEX = "uq_chat_members_active"

CHAT_COLUMNS = "id, name, description, chat_type, created_by, created_at, updated_at, is_active"
MEMBER_COLUMNS = "id, chat_id, user_id, role, joined_at, left_at, is_active"
MESSAGE_COLUMNS = "id, chat_id, sender_id, content, sent_at, edited_at, is_deleted"


@asynccontextmanager
async def _db_errors(member: Optional[ChatMember] = None):
    """
    Translate driver errors into domain/infrastructure errors.

    A unique violation on the active-membership index means a concurrent
    add won the race for the same (chat, user) pair.
    """
    try:
        yield
    except asyncpg.UniqueViolationError as e:
        if member is not None and e.constraint_name == ACTIVE_MEMBER_INDEX:
            raise UserAlreadyMemberError(member.user_id, member.chat_id) from e
        raise InfrastructureError(f"Unique constraint violated: {e}") from e
    except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        raise InfrastructureError(f"PostgreSQL error: {e}") from e


class PostgresChatStore:
    """
    Chat store backed by asyncpg.

    Soft-delete flags are filtered in SQL; rows are never removed.
    """

    # =========================================================================
    # Chats
    # =========================================================================

    async def get_chat(self, chat_id: uuid.UUID) -> Optional[Chat]:
        async with _db_errors():
            row = await pg_client.fetchrow(
                f"SELECT {CHAT_COLUMNS} FROM chats WHERE id = $1",
                chat_id,
            )
        return Chat.model_validate(dict(row)) if row else None

    async def create_chat_with_owner(self, chat: Chat, owner: ChatMember) -> None:
        async with _db_errors(owner):
            async with pg_client.transaction():
                await pg_client.execute(
                    f"""
                    INSERT INTO chats ({CHAT_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    chat.id, chat.name, chat.description, chat.chat_type.value,
                    chat.created_by, chat.created_at, chat.updated_at, chat.is_active,
                )
                await self._insert_member(owner)
        log.debug(f"Chat {chat.id} stored with owner {owner.user_id}")

    async def update_chat(self, chat: Chat) -> None:
        async with _db_errors():
            await pg_client.execute(
                """
                UPDATE chats
                SET name = $2, description = $3, updated_at = $4, is_active = $5
                WHERE id = $1
                """,
                chat.id, chat.name, chat.description, chat.updated_at, chat.is_active,
            )

    async def get_user_chats(self, user_id: uuid.UUID) -> List[Chat]:
        async with _db_errors():
            rows = await pg_client.fetch(
                """
                SELECT c.id, c.name, c.description, c.chat_type, c.created_by,
                       c.created_at, c.updated_at, c.is_active
                FROM chats c
                JOIN chat_members m ON m.chat_id = c.id
                WHERE m.user_id = $1 AND m.is_active AND c.is_active
                ORDER BY COALESCE(c.updated_at, c.created_at) DESC
                """,
                user_id,
            )
        return [Chat.model_validate(dict(r)) for r in rows]

    # =========================================================================
    # Members
    # =========================================================================

    async def _insert_member(self, member: ChatMember) -> None:
        await pg_client.execute(
            f"""
            INSERT INTO chat_members ({MEMBER_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            """,
            member.id, member.chat_id, member.user_id, member.role.value,
            member.joined_at, member.left_at, member.is_active,
        )

    async def add_member(self, member: ChatMember) -> None:
        async with _db_errors(member):
            await self._insert_member(member)

    async def update_member(self, member: ChatMember) -> None:
        async with _db_errors(member):
            await pg_client.execute(
                """
                UPDATE chat_members
                SET role = $2, joined_at = $3, left_at = $4, is_active = $5
                WHERE id = $1
                """,
                member.id, member.role.value, member.joined_at, member.left_at, member.is_active,
            )

    async def reactivate_member(self, member: ChatMember) -> None:
        async with _db_errors(member):
            status = await pg_client.execute(
                """
                UPDATE chat_members
                SET role = $2, joined_at = $3, left_at = NULL, is_active = TRUE
                WHERE id = $1 AND NOT is_active
                """,
                member.id, member.role.value, member.joined_at,
            )
        # "UPDATE 0": another request reactivated the row first
        if status.split()[-1] == "0":
            raise UserAlreadyMemberError(member.user_id, member.chat_id)

    async def get_member_by_chat_and_user(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        async with _db_errors():
            row = await pg_client.fetchrow(
                f"""
                SELECT {MEMBER_COLUMNS} FROM chat_members
                WHERE chat_id = $1 AND user_id = $2 AND is_active
                """,
                chat_id, user_id,
            )
        return ChatMember.model_validate(dict(row)) if row else None

    async def get_latest_member(
        self,
        chat_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[ChatMember]:
        async with _db_errors():
            row = await pg_client.fetchrow(
                f"""
                SELECT {MEMBER_COLUMNS} FROM chat_members
                WHERE chat_id = $1 AND user_id = $2
                ORDER BY is_active DESC, joined_at DESC
                LIMIT 1
                """,
                chat_id, user_id,
            )
        return ChatMember.model_validate(dict(row)) if row else None

    async def get_chat_members(self, chat_id: uuid.UUID) -> List[ChatMember]:
        async with _db_errors():
            rows = await pg_client.fetch(
                f"""
                SELECT {MEMBER_COLUMNS} FROM chat_members
                WHERE chat_id = $1 AND is_active
                ORDER BY joined_at
                """,
                chat_id,
            )
        return [ChatMember.model_validate(dict(r)) for r in rows]

    async def is_user_member(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        async with _db_errors():
            return await pg_client.fetchval(
                """
                SELECT EXISTS (
                    SELECT 1 FROM chat_members
                    WHERE chat_id = $1 AND user_id = $2 AND is_active
                )
                """,
                chat_id, user_id,
            )

    # =========================================================================
    # Messages
    # =========================================================================

    async def add_message(self, message: ChatMessage) -> None:
        async with _db_errors():
            await pg_client.execute(
                f"""
                INSERT INTO chat_messages ({MESSAGE_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                """,
                message.id, message.chat_id, message.sender_id, message.content,
                message.sent_at, message.edited_at, message.is_deleted,
            )

    async def edit_message(self, message: ChatMessage) -> None:
        async with _db_errors():
            status = await pg_client.execute(
                """
                UPDATE chat_messages
                SET content = $2, edited_at = $3
                WHERE id = $1 AND NOT is_deleted
                """,
                message.id, message.content, message.edited_at,
            )
        # "UPDATE 0": a concurrent delete committed first
        if status.split()[-1] == "0":
            raise MessageDeletedError(message.id, "edit")

    async def delete_message(self, message_id: uuid.UUID) -> None:
        async with _db_errors():
            status = await pg_client.execute(
                "UPDATE chat_messages SET is_deleted = TRUE WHERE id = $1 AND NOT is_deleted",
                message_id,
            )
        if status.split()[-1] == "0":
            raise MessageDeletedError(message_id, "delete")

    async def get_message(self, message_id: uuid.UUID) -> Optional[ChatMessage]:
        async with _db_errors():
            row = await pg_client.fetchrow(
                f"SELECT {MESSAGE_COLUMNS} FROM chat_messages WHERE id = $1",
                message_id,
            )
        return ChatMessage.model_validate(dict(row)) if row else None

    async def get_chat_messages(
        self,
        chat_id: uuid.UUID,
        skip: int = 0,
        take: int = 50,
    ) -> List[ChatMessage]:
        async with _db_errors():
            rows = await pg_client.fetch(
                f"""
                SELECT {MESSAGE_COLUMNS} FROM chat_messages
                WHERE chat_id = $1 AND NOT is_deleted
                ORDER BY sent_at DESC
                OFFSET $2 LIMIT $3
                """,
                chat_id, skip, take,
            )
        return [ChatMessage.model_validate(dict(r)) for r in rows]

    async def get_chat_message_count(self, chat_id: uuid.UUID) -> int:
        async with _db_errors():
            return await pg_client.fetchval(
                "SELECT COUNT(*) FROM chat_messages WHERE chat_id = $1 AND NOT is_deleted",
                chat_id,
            )
