# =============================================================================
# File: unistay/api/routers/chat_router.py
# Description: Chat domain API endpoints
# =============================================================================

from __future__ import annotations

from uuid import UUID
import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, Request, Response, status

from unistay.security.jwt_auth import get_current_user
from unistay.api.models.chat_api_models import (
    CreateChatRequest,
    UpdateChatRequest,
    AddMemberRequest,
    SendMessageRequest,
    EditMessageRequest,
)
from unistay.chat.commands import (
    CreateChatCommand,
    UpdateChatCommand,
    DeactivateChatCommand,
    AddMemberCommand,
    LeaveChatCommand,
    SendMessageCommand,
    EditMessageCommand,
    DeleteMessageCommand,
)
from unistay.chat.queries import (
    GetChatByIdQuery,
    GetUserChatsQuery,
    GetChatMembersQuery,
    GetChatMessagesQuery,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from unistay.chat.entities import ChatMember, ChatMessage
from unistay.chat.read_models import ChatView, ChatMemberView, ChatMessageView
from unistay.infra.cqrs.command_bus import CommandBus
from unistay.infra.cqrs.query_bus import QueryBus

log = logging.getLogger("unistay.api.chat")

router = APIRouter(prefix="/chats", tags=["chats"])

CurrentUser = Annotated[dict, Depends(get_current_user)]


# =============================================================================
# Dependency Injection
# =============================================================================

async def get_command_bus(request: Request) -> CommandBus:
    """Get command bus from application state"""
    command_bus = getattr(request.app.state, 'command_bus', None)
    if command_bus is None:
        raise RuntimeError("Command bus not configured")
    return command_bus


async def get_query_bus(request: Request) -> QueryBus:
    """Get query bus from application state"""
    query_bus = getattr(request.app.state, 'query_bus', None)
    if query_bus is None:
        raise RuntimeError("Query bus not configured")
    return query_bus


# =============================================================================
# Chat Endpoints
# =============================================================================

@router.post("", response_model=ChatView, status_code=status.HTTP_201_CREATED)
async def create_chat(
    request: CreateChatRequest,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
    query_bus: QueryBus = Depends(get_query_bus),
):
    """Create a new chat; the caller becomes its Owner"""
    command = CreateChatCommand(
        name=request.name,
        description=request.description,
        chat_type=request.chat_type,
        creator_id=current_user["user_id"],
    )
    chat = (await command_bus.send(command)).unwrap()
    log.info(f"Chat {chat.id} created by {current_user['user_id']}")

    result = await query_bus.query(GetChatByIdQuery(chat_id=chat.id, user_id=current_user["user_id"]))
    return result.unwrap()


@router.get("", response_model=List[ChatView])
async def get_my_chats(
    current_user: CurrentUser,
    query_bus: QueryBus = Depends(get_query_bus),
):
    """Get all active chats of the current user"""
    result = await query_bus.query(GetUserChatsQuery(user_id=current_user["user_id"]))
    return result.unwrap()


@router.get("/{chat_id}", response_model=ChatView)
async def get_chat(
    chat_id: UUID,
    current_user: CurrentUser,
    query_bus: QueryBus = Depends(get_query_bus),
):
    """Get chat details"""
    result = await query_bus.query(GetChatByIdQuery(chat_id=chat_id, user_id=current_user["user_id"]))
    return result.unwrap()


@router.put("/{chat_id}", response_model=ChatView)
async def update_chat(
    chat_id: UUID,
    request: UpdateChatRequest,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
    query_bus: QueryBus = Depends(get_query_bus),
):
    """Update chat name and description"""
    command = UpdateChatCommand(
        chat_id=chat_id,
        requestor_id=current_user["user_id"],
        name=request.name,
        description=request.description,
    )
    (await command_bus.send(command)).unwrap()

    result = await query_bus.query(GetChatByIdQuery(chat_id=chat_id, user_id=current_user["user_id"]))
    return result.unwrap()


@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: UUID,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Deactivate (soft delete) a chat"""
    command = DeactivateChatCommand(chat_id=chat_id, requestor_id=current_user["user_id"])
    (await command_bus.send(command)).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Member Endpoints
# =============================================================================

@router.post("/{chat_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_chat(
    chat_id: UUID,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Leave a chat"""
    command = LeaveChatCommand(chat_id=chat_id, user_id=current_user["user_id"])
    (await command_bus.send(command)).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{chat_id}/members", response_model=List[ChatMemberView])
async def get_chat_members(
    chat_id: UUID,
    current_user: CurrentUser,
    query_bus: QueryBus = Depends(get_query_bus),
):
    """Get active members of a chat"""
    result = await query_bus.query(GetChatMembersQuery(chat_id=chat_id, user_id=current_user["user_id"]))
    return result.unwrap()


@router.post("/{chat_id}/members", response_model=ChatMember, status_code=status.HTTP_201_CREATED)
async def add_member(
    chat_id: UUID,
    request: AddMemberRequest,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Add a user to a chat (Owner or Admin)"""
    command = AddMemberCommand(
        chat_id=chat_id,
        requestor_id=current_user["user_id"],
        target_user_id=request.user_id,
        role=request.role,
    )
    return (await command_bus.send(command)).unwrap()


# =============================================================================
# Message Endpoints
# =============================================================================

@router.get("/{chat_id}/messages", response_model=List[ChatMessageView])
async def get_chat_messages(
    chat_id: UUID,
    current_user: CurrentUser,
    query_bus: QueryBus = Depends(get_query_bus),
    skip: int = Query(0, ge=0),
    take: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Get messages, newest first"""
    query = GetChatMessagesQuery(
        chat_id=chat_id,
        user_id=current_user["user_id"],
        skip=skip,
        take=take,
    )
    return (await query_bus.query(query)).unwrap()


@router.post("/{chat_id}/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED)
async def send_message(
    chat_id: UUID,
    request: SendMessageRequest,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Send a message to a chat"""
    command = SendMessageCommand(
        chat_id=chat_id,
        sender_id=current_user["user_id"],
        content=request.content,
    )
    return (await command_bus.send(command)).unwrap()


@router.put("/{chat_id}/messages/{message_id}", response_model=ChatMessage)
async def edit_message(
    chat_id: UUID,
    message_id: UUID,
    request: EditMessageRequest,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Edit one's own message"""
    command = EditMessageCommand(
        chat_id=chat_id,
        message_id=message_id,
        requesting_user_id=current_user["user_id"],
        content=request.content,
    )
    return (await command_bus.send(command)).unwrap()


@router.delete("/{chat_id}/messages/{message_id}", response_model=ChatMessage)
async def delete_message(
    chat_id: UUID,
    message_id: UUID,
    current_user: CurrentUser,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Soft delete one's own message; returns it with is_deleted set"""
    command = DeleteMessageCommand(
        chat_id=chat_id,
        message_id=message_id,
        requesting_user_id=current_user["user_id"],
    )
    return (await command_bus.send(command)).unwrap()
