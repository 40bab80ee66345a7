from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.auth import get_current_user_id
from chat_service.config import DEFAULT_MESSAGE_LIMIT, MAX_MESSAGE_LIMIT
from chat_service.database import get_db
from chat_service.models.api.conversations import (
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
    CreateDirectConversationRequest,
)
from chat_service.models.api.messages import MessageResponse, SendMessageRequest
from chat_service.models.api.users import UserResponse
from chat_service.routers.errors import http_error
from chat_service.services.create_conversation_service import (
    CreateConversationService,
)
from chat_service.services.get_conversation_messages_service import (
    GetConversationMessagesService,
)
from chat_service.services.list_conversations_service import ListConversationsService
from chat_service.services.send_message_service import SendMessageService

router = APIRouter()


@router.get("", response_model=List[ConversationSummaryResponse])
async def list_conversations(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[ConversationSummaryResponse]:
    """
    List the caller's conversations, most recently active first.

    Each entry includes the last message, the unread count and the other members.
    """
    try:
        service = ListConversationsService(db)
        return await service.list_conversations(user_id)
    except Exception as e:
        raise http_error(e, "Error fetching conversations")


@router.post("", response_model=ConversationResponse)
async def create_conversation(
    request: CreateConversationRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """Create a group conversation, or open a direct one when isGroup is false."""
    try:
        service = CreateConversationService(db)
        return await service.create_conversation(user_id, request)
    except Exception as e:
        raise http_error(e, "Error creating conversation")


@router.post("/direct", response_model=ConversationResponse)
async def create_direct_conversation(
    request: CreateDirectConversationRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """Return the existing direct conversation with a user, or start one."""
    try:
        service = CreateConversationService(db)
        return await service.find_or_create_direct_conversation(
            user_id, request.other_user_id
        )
    except Exception as e:
        raise http_error(e, "Error creating direct conversation")


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """
    Get a specific conversation.

    Path parameters:
    - conversation_id: UUID of the conversation
    """
    try:
        service = ListConversationsService(db)
        return await service.get_conversation(user_id, conversation_id)
    except Exception as e:
        raise http_error(e, "Error fetching conversation")


@router.get("/{conversation_id}/members", response_model=List[UserResponse])
async def get_conversation_members(
    conversation_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    try:
        service = ListConversationsService(db)
        return await service.get_conversation_members(user_id, conversation_id)
    except Exception as e:
        raise http_error(e, "Error fetching conversation members")


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
async def get_conversation_messages(
    conversation_id: UUID,
    limit: Optional[int] = Query(
        DEFAULT_MESSAGE_LIMIT,
        description="Maximum number of messages to return",
        ge=1,
        le=MAX_MESSAGE_LIMIT,
    ),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[MessageResponse]:
    """
    Get the latest messages of a conversation in chronological order.

    Query parameters:
    - limit: Maximum number of messages to return (default: 50, max: 1000)
    """
    try:
        service = GetConversationMessagesService(db)
        return await service.get_conversation_messages(
            user_id=user_id, conversation_id=conversation_id, limit=limit
        )
    except Exception as e:
        raise http_error(e, "Error fetching messages")


@router.post("/{conversation_id}/messages", response_model=MessageResponse)
async def send_message(
    conversation_id: UUID,
    request: SendMessageRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Send a message; it is returned with its sender and already read by them."""
    try:
        service = SendMessageService(db)
        return await service.send_message(user_id, conversation_id, request)
    except Exception as e:
        raise http_error(e, "Error sending message")
