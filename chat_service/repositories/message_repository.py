from typing import Any, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chat_service.config import DEFAULT_MESSAGE_LIMIT
from chat_service.errors import NotFoundError
from chat_service.models.api.messages import MessageResponse
from chat_service.models.db._utils import utcnow
from chat_service.models.db.conversation_model import ConversationModel
from chat_service.models.db.message_model import MessageModel
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.base_repository import BaseRepository
from chat_service.repositories.user_repository import UserRepository


class MessageRepository(BaseRepository[MessageModel, MessageResponse]):
    """Repository for message operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MessageModel)
        self.user_repo = UserRepository(db)

    async def get_by_conversation(
        self, conversation_id: UUID, limit: Optional[int] = DEFAULT_MESSAGE_LIMIT
    ) -> List[MessageResponse]:
        """Get the latest `limit` messages of a conversation, oldest first.

        Each message carries its sender.
        """
        if limit is None:
            limit = DEFAULT_MESSAGE_LIMIT
        if limit <= 0:
            raise ValueError("Limit must be a positive integer")

        # Newest first so the LIMIT keeps the most recent messages
        query = (
            select(self.model_class, UserModel)
            .join(UserModel, UserModel.id == self.model_class.sender_id)
            .where(self.model_class.conversation_id == conversation_id)
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        rows = result.all()

        return [self._to_pydantic(message, sender) for message, sender in reversed(rows)]

    async def get_with_sender(self, message_id: UUID) -> Optional[MessageResponse]:
        """Get a single message with its sender loaded."""
        query = (
            select(self.model_class, UserModel)
            .join(UserModel, UserModel.id == self.model_class.sender_id)
            .where(self.model_class.id == message_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        row = result.one_or_none()
        if row is None:
            return None
        message, sender = row
        return self._to_pydantic(message, sender)

    async def add(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        message_type: str = "text",
    ) -> MessageModel:
        """Insert a message and bump the conversation's updated_at.

        Does not commit; run inside the caller's transaction.
        """
        now = utcnow()
        message = MessageModel(
            id=uuid4(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            message_type=message_type,
            is_edited=False,
            created_at=now,
            updated_at=now,
        )

        self.db.add(message)
        await self.db.flush()
        # Last writer wins; only an ordering hint for conversation lists
        await self.db.execute(
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(updated_at=now)
        )
        return message

    async def create(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        message_type: str = "text",
    ) -> MessageResponse:
        """Insert a message and bump the conversation's updated_at.

        Both writes share one transaction. Membership is not checked here.
        """
        async with self.transaction():
            message = await self.add(conversation_id, sender_id, content, message_type)

        return await self.get_created(message.id)

    async def get_created(self, message_id: UUID) -> MessageResponse:
        """Re-read a just-committed message with its sender."""
        created = await self.get_with_sender(message_id)
        if created is None:
            raise NotFoundError(f"Message with ID {message_id} not found")
        return created

    def _to_pydantic(self, db_model: Any, sender: Any = None) -> MessageResponse:
        """Convert SQLAlchemy MessageModel to Pydantic MessageResponse."""
        return MessageResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            sender_id=db_model.sender_id,
            content=db_model.content,
            message_type=db_model.message_type,
            is_edited=db_model.is_edited,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
            sender=self.user_repo._to_pydantic(sender) if sender is not None else None,
        )
