# Chat Query Handlers
# Import all handlers to trigger auto-registration via decorators

from unistay.chat.query_handlers.chat_query_handlers import (
    GetChatByIdQueryHandler,
    GetUserChatsQueryHandler,
    GetChatMembersQueryHandler,
    GetChatMessagesQueryHandler,
    IsUserMemberQueryHandler,
)

__all__ = [
    'GetChatByIdQueryHandler',
    'GetUserChatsQueryHandler',
    'GetChatMembersQueryHandler',
    'GetChatMessagesQueryHandler',
    'IsUserMemberQueryHandler',
]
