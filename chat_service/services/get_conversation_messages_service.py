from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.config import DEFAULT_MESSAGE_LIMIT, MAX_MESSAGE_LIMIT
from chat_service.errors import ValidationError
from chat_service.models.api.messages import MessageResponse
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.services.membership import require_membership


class GetConversationMessagesService:
    """Service for retrieving messages from a specific conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.message_repo = MessageRepository(db)

    async def get_conversation_messages(
        self,
        user_id: UUID,
        conversation_id: UUID,
        limit: Optional[int] = DEFAULT_MESSAGE_LIMIT,
    ) -> List[MessageResponse]:
        """
        Get messages for a specific conversation:

        1. Validate the page size
        2. Verify the conversation exists and the user is a member
        3. Return the latest messages in chronological order
        """
        if limit is None:
            limit = DEFAULT_MESSAGE_LIMIT
        if limit <= 0 or limit > MAX_MESSAGE_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_MESSAGE_LIMIT}")

        await require_membership(self.conversation_repo, conversation_id, user_id)

        return await self.message_repo.get_by_conversation(conversation_id, limit=limit)
