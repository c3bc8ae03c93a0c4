# =============================================================================
# File: unistay/chat/enums.py
# Description: Chat domain enumerations
# =============================================================================

from enum import Enum


class ChatType(str, Enum):
    """Types of chats"""
    GROUP = "group"
    PRIVATE = "private"


class ChatMemberRole(str, Enum):
    """Member roles in chat, lowest to highest"""
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"


# Roles allowed to manage chat details and membership
MANAGER_ROLES = frozenset({ChatMemberRole.OWNER, ChatMemberRole.ADMIN})
