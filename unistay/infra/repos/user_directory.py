# =============================================================================
# File: unistay/infra/repos/user_directory.py
# Description: UserDirectoryPort adapters
# =============================================================================

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, Optional

import asyncpg

from unistay.infra.persistence import pg_client
from unistay.chat.read_models import UserSummary
from unistay.common.exceptions.exceptions import InfrastructureError

log = logging.getLogger("unistay.infra.user_directory")


class PostgresUserDirectory:
    """Reads users from the shared users table"""

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserSummary]:
        try:
            row = await pg_client.fetchrow(
                """
                SELECT id, first_name, last_name, email, avatar_url
                FROM users WHERE id = $1
                """,
                user_id,
            )
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise InfrastructureError(f"PostgreSQL error: {e}") from e
        return UserSummary.model_validate(dict(row)) if row else None


class InMemoryUserDirectory:
    """Fixed set of users, for tests and the memory store backend"""

    def __init__(self, users: Iterable[UserSummary] = ()):
        self._users: Dict[uuid.UUID, UserSummary] = {u.id: u for u in users}

    def add(self, user: UserSummary) -> UserSummary:
        self._users[user.id] = user
        return user

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserSummary]:
        return self._users.get(user_id)
