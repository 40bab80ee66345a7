from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.auth import get_current_user_id
from chat_service.database import get_db
from chat_service.models.api.users import (
    SuccessResponse,
    UpdateStatusRequest,
    UpsertUserRequest,
    UserResponse,
)
from chat_service.routers.errors import http_error
from chat_service.services.user_service import UserService

router = APIRouter()
auth_router = APIRouter()


@router.post("/status", response_model=SuccessResponse)
async def update_status(
    request: UpdateStatusRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Report the caller as online or offline."""
    try:
        service = UserService(db)
        await service.update_status(user_id, request.is_online)
        return SuccessResponse()
    except Exception as e:
        raise http_error(e, "Error updating user status")


@router.put("/me", response_model=UserResponse)
async def sync_current_user(
    request: UpsertUserRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Create or refresh the caller's profile from identity-provider claims."""
    try:
        service = UserService(db)
        return await service.sync_user(user_id, request)
    except Exception as e:
        raise http_error(e, "Error syncing user")


@auth_router.get("/user", response_model=UserResponse)
async def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Get the authenticated user's record."""
    try:
        service = UserService(db)
        return await service.get_user(user_id)
    except Exception as e:
        raise http_error(e, "Error fetching user")
