from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.auth import get_current_user_id
from chat_service.database import get_db
from chat_service.models.api.messages import ReadReceiptResponse
from chat_service.models.api.users import SuccessResponse
from chat_service.routers.errors import http_error
from chat_service.services.read_receipt_service import ReadReceiptService

router = APIRouter()


@router.post("/{message_id}/read", response_model=SuccessResponse)
async def mark_message_as_read(
    message_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Mark a message as read by the caller. Repeating the call is harmless."""
    try:
        service = ReadReceiptService(db)
        await service.mark_as_read(user_id, message_id)
        return SuccessResponse()
    except Exception as e:
        raise http_error(e, "Error marking message as read")


@router.get("/{message_id}/receipts", response_model=List[ReadReceiptResponse])
async def get_message_read_receipts(
    message_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[ReadReceiptResponse]:
    """List who has read a message, earliest reader first."""
    try:
        service = ReadReceiptService(db)
        return await service.get_read_receipts(user_id, message_id)
    except Exception as e:
        raise http_error(e, "Error fetching read receipts")
