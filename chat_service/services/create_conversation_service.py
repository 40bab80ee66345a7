import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.errors import NotFoundError, ValidationError
from chat_service.models.api.conversations import (
    ConversationResponse,
    CreateConversationRequest,
)
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class CreateConversationService:
    """Service for starting group and direct conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.user_repo = UserRepository(db)

    async def create_conversation(
        self, user_id: UUID, request: CreateConversationRequest
    ) -> ConversationResponse:
        """
        Create a conversation started by `user_id`:

        1. Validate the request
        2. For direct conversations, reuse an existing thread with the same user
        3. Verify every invited user exists
        4. Create the conversation and all memberships atomically
        """
        invitees = [
            member_id
            for member_id in dict.fromkeys(request.member_ids)
            if member_id != user_id
        ]

        if not request.is_group:
            if len(invitees) != 1:
                raise ValidationError(
                    "A direct conversation needs exactly one other member"
                )
            return await self.find_or_create_direct_conversation(user_id, invitees[0])

        name = (request.name or "").strip()
        if not name:
            raise ValidationError("Group conversations require a name")

        await self._ensure_users_exist([user_id, *invitees])
        conversation = await self.conversation_repo.create_with_members(
            name=name, is_group=True, member_ids=[user_id, *invitees]
        )
        logger.info("User %s created group conversation %s", user_id, conversation.id)
        return conversation

    async def find_or_create_direct_conversation(
        self, user_id: UUID, other_user_id: UUID
    ) -> ConversationResponse:
        """Return the direct conversation between two users, creating it if needed."""
        if other_user_id == user_id:
            raise ValidationError("Cannot start a direct conversation with yourself")

        existing = await self._find_direct_conversation(user_id, other_user_id)
        if existing:
            return existing

        await self._ensure_users_exist([user_id, other_user_id])
        conversation = await self.conversation_repo.create_with_members(
            name=None, is_group=False, member_ids=[user_id, other_user_id]
        )
        logger.info(
            "Created direct conversation %s between %s and %s",
            conversation.id,
            user_id,
            other_user_id,
        )
        return conversation

    async def _find_direct_conversation(
        self, user_id: UUID, other_user_id: UUID
    ) -> Optional[ConversationResponse]:
        conversations = await self.conversation_repo.list_for_user(user_id)
        for conversation in conversations:
            if (
                not conversation.is_group
                and len(conversation.other_members) == 1
                and conversation.other_members[0].id == other_user_id
            ):
                return ConversationResponse(
                    id=conversation.id,
                    name=conversation.name,
                    is_group=conversation.is_group,
                    created_at=conversation.created_at,
                    updated_at=conversation.updated_at,
                )
        return None

    async def _ensure_users_exist(self, user_ids: List[UUID]) -> None:
        found = {user.id for user in await self.user_repo.get_many(user_ids)}
        missing = [str(user_id) for user_id in user_ids if user_id not in found]
        if missing:
            raise NotFoundError(f"Users not found: {', '.join(missing)}")
