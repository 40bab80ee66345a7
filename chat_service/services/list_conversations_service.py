from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.models.api.conversations import (
    ConversationResponse,
    ConversationSummaryResponse,
)
from chat_service.models.api.users import UserResponse
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.services.membership import require_membership


class ListConversationsService:
    """Service for reading a user's conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)

    async def list_conversations(
        self, user_id: UUID
    ) -> List[ConversationSummaryResponse]:
        """
        List the user's conversations, most recently active first, each with
        its last message, unread count and other members.
        """
        return await self.conversation_repo.list_for_user(user_id)

    async def get_conversation(
        self, user_id: UUID, conversation_id: UUID
    ) -> ConversationResponse:
        """Get a single conversation the user belongs to."""
        return await require_membership(self.conversation_repo, conversation_id, user_id)

    async def get_conversation_members(
        self, user_id: UUID, conversation_id: UUID
    ) -> List[UserResponse]:
        """Get all members of a conversation the user belongs to."""
        await require_membership(self.conversation_repo, conversation_id, user_id)
        return await self.conversation_repo.get_members(conversation_id)
