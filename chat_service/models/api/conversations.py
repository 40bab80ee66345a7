from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .base import ApiModel
from .messages import MessageResponse
from .users import UserResponse


class ConversationResponse(ApiModel):
    """Response model for conversation data."""

    id: UUID
    name: Optional[str]
    is_group: bool
    created_at: datetime
    updated_at: datetime


class ConversationSummaryResponse(ConversationResponse):
    """A conversation as seen by one member in their conversation list."""

    last_message: Optional[MessageResponse] = None
    unread_count: int = 0
    other_members: List[UserResponse] = Field(default_factory=list)


class ConversationMemberResponse(ApiModel):
    """Response model for a conversation membership row."""

    id: UUID
    conversation_id: UUID
    user_id: UUID
    joined_at: datetime


class CreateConversationRequest(ApiModel):
    """Request model for creating a conversation."""

    name: Optional[str] = Field(default=None, max_length=255)
    is_group: bool = False
    member_ids: List[UUID] = Field(..., min_length=1)


class CreateDirectConversationRequest(ApiModel):
    """Request model for opening a direct conversation."""

    other_user_id: UUID
