from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from .base import ApiModel
from .users import UserResponse

MessageType = Literal["text", "image", "file"]


class SendMessageRequest(ApiModel):
    """Request model for sending a message."""

    content: str = Field(..., description="Message content")
    message_type: MessageType = Field(default="text", description="text, image or file")


class MessageResponse(ApiModel):
    """Response model for message data."""

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    message_type: str
    is_edited: bool
    created_at: datetime
    updated_at: datetime
    sender: Optional[UserResponse] = None


class ReadReceiptResponse(ApiModel):
    """A user who has read a message, and when."""

    user: UserResponse
    read_at: datetime
