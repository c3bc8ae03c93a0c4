# =============================================================================
# File: unistay/chat/ports/user_directory_port.py
# Description: Port interface for read-only user lookups
# =============================================================================

from __future__ import annotations

import uuid
from typing import Protocol, Optional, runtime_checkable

from unistay.chat.read_models import UserSummary


@runtime_checkable
class UserDirectoryPort(Protocol):
    """
    Port: User Directory

    Users belong to the accounts domain; chat only reads them to check
    that actors exist and to decorate projections.
    """

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserSummary]:
        ...
