import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.errors import ValidationError
from chat_service.models.api.messages import MessageResponse, SendMessageRequest
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.repositories.read_receipt_repository import ReadReceiptRepository
from chat_service.services.membership import require_membership

logger = logging.getLogger(__name__)


class SendMessageService:
    """Service for posting messages to a conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.message_repo = MessageRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.read_receipt_repo = ReadReceiptRepository(db)

    async def send_message(
        self, user_id: UUID, conversation_id: UUID, request: SendMessageRequest
    ) -> MessageResponse:
        """
        Main business logic for sending a message:
        1. Reject empty content
        2. Verify the sender is a member of the conversation
        3. Save the message, bump the conversation's activity time and mark
           it read by the sender, all in one transaction
        4. Return it with the sender attached
        """
        if not request.content.strip():
            raise ValidationError("Message content is required")

        await require_membership(self.conversation_repo, conversation_id, user_id)

        async with self.message_repo.transaction():
            created = await self.message_repo.add(
                conversation_id=conversation_id,
                sender_id=user_id,
                content=request.content,
                message_type=request.message_type,
            )
            await self.read_receipt_repo.add(created.id, user_id)

        message = await self.message_repo.get_created(created.id)

        logger.info(
            "User %s sent message %s to conversation %s",
            user_id,
            message.id,
            conversation_id,
        )
        return message
