# =============================================================================
# File: unistay/chat/exceptions.py
# Description: Chat domain exceptions
# =============================================================================

import uuid
from typing import Optional

from unistay.common.exceptions.exceptions import (
    DomainError,
    BusinessRuleError,
    ConflictError,
    OperationFailedError,
    PermissionError,
    ResourceNotFoundError,
)


class ChatError(DomainError):
    """Base exception for Chat domain"""
    pass


class ChatNotFoundError(ResourceNotFoundError):
    """Chat not found"""
    code = "chat_not_found"

    def __init__(self, chat_id: uuid.UUID):
        super().__init__(f"Chat with ID {chat_id} was not found.")
        self.chat_id = chat_id


class ChatMessageNotFoundError(ResourceNotFoundError):
    """Message not found"""
    code = "chat_message_not_found"

    def __init__(self, message_id: uuid.UUID):
        super().__init__(f"Chat message with ID {message_id} was not found.")
        self.message_id = message_id


class UserNotMemberError(PermissionError):
    """User has no active membership in the chat"""
    code = "not_member"

    def __init__(self, user_id: uuid.UUID, chat_id: uuid.UUID):
        super().__init__(f"User {user_id} is not a member of chat {chat_id}.")
        self.user_id = user_id
        self.chat_id = chat_id


class InsufficientPermissionsError(PermissionError):
    """User's role or authorship does not allow the action"""
    code = "insufficient_permissions"

    def __init__(self, user_id: uuid.UUID, chat_id: uuid.UUID, action: str):
        super().__init__(
            f"User {user_id} does not have permission to {action} in chat {chat_id}."
        )
        self.user_id = user_id
        self.chat_id = chat_id
        self.action = action


class UserAlreadyMemberError(ConflictError):
    """User already has an active membership in the chat"""
    code = "already_member"

    def __init__(self, user_id: uuid.UUID, chat_id: uuid.UUID):
        super().__init__(f"User {user_id} is already a member of chat {chat_id}.")
        self.user_id = user_id
        self.chat_id = chat_id


class ChatInactiveError(BusinessRuleError):
    """Chat is deactivated"""
    code = "chat_inactive"

    def __init__(self, chat_id: uuid.UUID):
        super().__init__(f"Chat {chat_id} is not active.")
        self.chat_id = chat_id


class ChatOperationFailedError(OperationFailedError):
    """Unexpected failure while operating on a chat"""

    def __init__(self, chat_id: uuid.UUID, operation: str, reason: Optional[str] = None):
        message = f"Failed to {operation} for chat {chat_id}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.chat_id = chat_id
        self.operation = operation


class ChatMessageOperationFailedError(OperationFailedError):
    """Unexpected or rule-breaking failure while operating on a message"""

    def __init__(self, message_id: uuid.UUID, operation: str, reason: Optional[str] = None):
        message = f"Failed to {operation} for message {message_id}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.message_id = message_id
        self.operation = operation


class MessageDeletedError(ChatError):
    """Raised by the entity when a deleted message is mutated"""

    def __init__(self, message_id: uuid.UUID, action: str):
        super().__init__(f"Cannot {action} deleted message")
        self.message_id = message_id
        self.action = action


class MemberInactiveError(ChatError):
    """Raised by the entity when an inactive membership is mutated"""

    def __init__(self, member_id: uuid.UUID):
        super().__init__(f"Chat member {member_id} is not active")
        self.member_id = member_id
