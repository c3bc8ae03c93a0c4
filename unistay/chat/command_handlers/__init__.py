# Chat Command Handlers
# Import all handlers to trigger auto-registration via decorators

from unistay.chat.command_handlers.chat_handlers import (
    CreateChatHandler,
    UpdateChatHandler,
    DeactivateChatHandler,
)
from unistay.chat.command_handlers.participant_handlers import (
    AddMemberHandler,
    LeaveChatHandler,
)
from unistay.chat.command_handlers.message_handlers import (
    SendMessageHandler,
    EditMessageHandler,
    DeleteMessageHandler,
)

__all__ = [
    'CreateChatHandler',
    'UpdateChatHandler',
    'DeactivateChatHandler',
    'AddMemberHandler',
    'LeaveChatHandler',
    'SendMessageHandler',
    'EditMessageHandler',
    'DeleteMessageHandler',
]
