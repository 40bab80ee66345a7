from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.errors import NotFoundError
from chat_service.models.api.messages import MessageResponse, ReadReceiptResponse
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.repositories.read_receipt_repository import ReadReceiptRepository
from chat_service.services.membership import require_membership


class ReadReceiptService:
    """Service for marking messages read and listing who read them."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.message_repo = MessageRepository(db)
        self.read_receipt_repo = ReadReceiptRepository(db)

    async def mark_as_read(self, user_id: UUID, message_id: UUID) -> None:
        """Mark a message read by the user. Safe to repeat."""
        await self._get_accessible_message(user_id, message_id)
        await self.read_receipt_repo.mark_as_read(message_id, user_id)

    async def get_read_receipts(
        self, user_id: UUID, message_id: UUID
    ) -> List[ReadReceiptResponse]:
        await self._get_accessible_message(user_id, message_id)
        return await self.read_receipt_repo.get_by_message(message_id)

    async def _get_accessible_message(
        self, user_id: UUID, message_id: UUID
    ) -> MessageResponse:
        message = await self.message_repo.get_by_id(message_id)
        if not message:
            raise NotFoundError(f"Message with ID {message_id} not found")
        await require_membership(
            self.conversation_repo, message.conversation_id, user_id
        )
        return message
