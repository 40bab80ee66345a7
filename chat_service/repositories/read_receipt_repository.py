from typing import Any, List
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chat_service.database import dialect_insert
from chat_service.models.api.messages import ReadReceiptResponse
from chat_service.models.db._utils import utcnow
from chat_service.models.db.read_receipt_model import ReadReceiptModel
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.base_repository import BaseRepository
from chat_service.repositories.user_repository import UserRepository


class ReadReceiptRepository(BaseRepository[ReadReceiptModel, ReadReceiptResponse]):
    """Repository for message read receipts."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ReadReceiptModel)
        self.user_repo = UserRepository(db)

    async def add(self, message_id: UUID, user_id: UUID) -> None:
        """Insert-or-ignore a receipt without committing."""
        statement = (
            dialect_insert(self.db, ReadReceiptModel.__table__)
            .values(id=uuid4(), message_id=message_id, user_id=user_id, read_at=utcnow())
            .on_conflict_do_nothing(index_elements=["message_id", "user_id"])
        )
        await self.db.execute(statement)

    async def mark_as_read(self, message_id: UUID, user_id: UUID) -> None:
        """Record that a user read a message. Repeated calls are no-ops."""
        async with self.transaction():
            await self.add(message_id, user_id)

    async def get_by_message(self, message_id: UUID) -> List[ReadReceiptResponse]:
        """Get every reader of a message, earliest first."""
        query = (
            select(self.model_class, UserModel)
            .join(UserModel, UserModel.id == self.model_class.user_id)
            .where(self.model_class.message_id == message_id)
            .order_by(self.model_class.read_at, UserModel.id)
        )
        result = await self.db.execute(query)
        return [self._to_pydantic(receipt, user) for receipt, user in result.all()]

    def _to_pydantic(self, db_model: Any, user: Any) -> ReadReceiptResponse:
        """Convert a receipt row and its reader to ReadReceiptResponse."""
        return ReadReceiptResponse(
            user=self.user_repo._to_pydantic(user),
            read_at=db_model.read_at,
        )
