import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chat_service.database import dialect_insert
from chat_service.models.api.conversations import (
    ConversationMemberResponse,
    ConversationResponse,
    ConversationSummaryResponse,
)
from chat_service.models.api.users import UserResponse
from chat_service.models.db._utils import utcnow
from chat_service.models.db.conversation_member_model import ConversationMemberModel
from chat_service.models.db.conversation_model import ConversationModel
from chat_service.models.db.message_model import MessageModel
from chat_service.models.db.read_receipt_model import ReadReceiptModel
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.base_repository import BaseRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[ConversationModel, ConversationResponse]):
    """Repository for conversation, membership and conversation-list operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationModel)

    async def create_with_members(
        self, name: Optional[str], is_group: bool, member_ids: List[UUID]
    ) -> ConversationResponse:
        """Create a conversation and all of its memberships in one transaction.

        Either the conversation and every membership row are persisted, or
        none of them are.
        """
        member_ids = list(dict.fromkeys(member_ids))
        now = utcnow()
        conversation = ConversationModel(
            id=uuid4(), name=name, is_group=is_group, created_at=now, updated_at=now
        )

        async with self.transaction():
            self.db.add(conversation)
            await self.db.flush()
            for user_id in member_ids:
                self.db.add(
                    ConversationMemberModel(
                        conversation_id=conversation.id, user_id=user_id, joined_at=now
                    )
                )
            await self.db.flush()

        logger.info(
            "Created conversation %s with %d members", conversation.id, len(member_ids)
        )
        return self._to_pydantic(conversation)

    async def add_member(
        self, conversation_id: UUID, user_id: UUID
    ) -> ConversationMemberResponse:
        """Add a user to a conversation; an existing membership is returned as is."""
        statement = (
            dialect_insert(self.db, ConversationMemberModel.__table__)
            .values(
                id=uuid4(),
                conversation_id=conversation_id,
                user_id=user_id,
                joined_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["conversation_id", "user_id"])
        )
        async with self.transaction():
            await self.db.execute(statement)

        query = select(ConversationMemberModel).where(
            ConversationMemberModel.conversation_id == conversation_id,
            ConversationMemberModel.user_id == user_id,
        )
        result = await self.db.execute(query)
        member = result.scalar_one()
        return ConversationMemberResponse(
            id=member.id,
            conversation_id=member.conversation_id,
            user_id=member.user_id,
            joined_at=member.joined_at,
        )

    async def get_members(self, conversation_id: UUID) -> List[UserResponse]:
        """Get every member of a conversation, in join order."""
        query = (
            select(UserModel)
            .join(ConversationMemberModel, ConversationMemberModel.user_id == UserModel.id)
            .where(ConversationMemberModel.conversation_id == conversation_id)
            .order_by(ConversationMemberModel.joined_at, UserModel.id)
        )
        result = await self.db.execute(query)
        user_repo = UserRepository(self.db)
        return [user_repo._to_pydantic(user) for user in result.scalars().all()]

    async def is_member(self, conversation_id: UUID, user_id: UUID) -> bool:
        query = select(ConversationMemberModel.id).where(
            ConversationMemberModel.conversation_id == conversation_id,
            ConversationMemberModel.user_id == user_id,
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def list_for_user(self, user_id: UUID) -> List[ConversationSummaryResponse]:
        """List a user's conversations, most recently active first.

        Each entry carries the latest message, the number of messages from
        other members the user has no read receipt for, and the other
        members. Two queries in total regardless of how many conversations
        the user belongs to.
        """
        my_conversations = (
            select(ConversationMemberModel.conversation_id)
            .where(ConversationMemberModel.user_id == user_id)
            .correlate(None)
            .scalar_subquery()
        )

        ranked_messages = (
            select(
                MessageModel.id.label("message_id"),
                MessageModel.conversation_id.label("conversation_id"),
                func.row_number()
                .over(
                    partition_by=MessageModel.conversation_id,
                    order_by=(MessageModel.created_at.desc(), MessageModel.id.desc()),
                )
                .label("position"),
            )
            .where(MessageModel.conversation_id.in_(my_conversations))
            .subquery("ranked_messages")
        )
        last_messages = (
            select(ranked_messages.c.conversation_id, ranked_messages.c.message_id)
            .where(ranked_messages.c.position == 1)
            .subquery("last_messages")
        )

        unread_counts = (
            select(
                MessageModel.conversation_id.label("conversation_id"),
                func.count(MessageModel.id).label("unread_count"),
            )
            .outerjoin(
                ReadReceiptModel,
                and_(
                    ReadReceiptModel.message_id == MessageModel.id,
                    ReadReceiptModel.user_id == user_id,
                ),
            )
            .where(
                MessageModel.conversation_id.in_(my_conversations),
                MessageModel.sender_id != user_id,
                ReadReceiptModel.id.is_(None),
            )
            .group_by(MessageModel.conversation_id)
            .subquery("unread_counts")
        )

        query = (
            select(
                ConversationModel,
                MessageModel,
                func.coalesce(unread_counts.c.unread_count, 0),
            )
            .select_from(ConversationModel)
            .join(
                ConversationMemberModel,
                and_(
                    ConversationMemberModel.conversation_id == ConversationModel.id,
                    ConversationMemberModel.user_id == user_id,
                ),
            )
            .outerjoin(
                last_messages, last_messages.c.conversation_id == ConversationModel.id
            )
            .outerjoin(MessageModel, MessageModel.id == last_messages.c.message_id)
            .outerjoin(
                unread_counts, unread_counts.c.conversation_id == ConversationModel.id
            )
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        rows = result.all()
        if not rows:
            return []

        other_members = await self._get_other_members(
            [conversation.id for conversation, _, _ in rows], user_id
        )
        message_repo = MessageRepository(self.db)

        return [
            ConversationSummaryResponse(
                **self._to_pydantic(conversation).model_dump(),
                last_message=(
                    message_repo._to_pydantic(last_message) if last_message else None
                ),
                unread_count=int(unread_count),
                other_members=other_members.get(conversation.id, []),
            )
            for conversation, last_message, unread_count in rows
        ]

    async def _get_other_members(
        self, conversation_ids: List[UUID], user_id: UUID
    ) -> Dict[UUID, List[UserResponse]]:
        """Batch-fetch every member except `user_id` for the given conversations."""
        query = (
            select(ConversationMemberModel.conversation_id, UserModel)
            .join(UserModel, UserModel.id == ConversationMemberModel.user_id)
            .where(
                ConversationMemberModel.conversation_id.in_(conversation_ids),
                ConversationMemberModel.user_id != user_id,
            )
            .order_by(ConversationMemberModel.joined_at, UserModel.id)
        )
        result = await self.db.execute(query)

        user_repo = UserRepository(self.db)
        members: Dict[UUID, List[UserResponse]] = defaultdict(list)
        for conversation_id, user in result.all():
            members[conversation_id].append(user_repo._to_pydantic(user))
        return members

    def _to_pydantic(self, db_model: Any) -> ConversationResponse:
        """Convert SQLAlchemy ConversationModel to Pydantic ConversationResponse."""
        return ConversationResponse(
            id=db_model.id,
            name=db_model.name,
            is_group=db_model.is_group,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )
