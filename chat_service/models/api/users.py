from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import ApiModel


class UserResponse(ApiModel):
    """Response model for user data."""

    id: UUID
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    profile_image_url: Optional[str]
    is_online: bool
    last_seen: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class UpsertUserRequest(ApiModel):
    """Profile fields pushed by the identity provider."""

    email: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    profile_image_url: Optional[str] = Field(default=None, max_length=2048)


class UpdateStatusRequest(ApiModel):
    """Request model for presence updates."""

    is_online: bool = Field(..., description="Whether the user is currently online")


class SuccessResponse(ApiModel):
    success: bool = True
