from datetime import datetime, timezone
from typing import Awaitable, Callable
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chat_service.errors import AuthorizationError, NotFoundError, ValidationError
from chat_service.models.api.conversations import ConversationResponse
from chat_service.models.api.messages import SendMessageRequest
from chat_service.models.db.message_model import MessageModel
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.read_receipt_repository import ReadReceiptRepository
from chat_service.services.send_message_service import SendMessageService


class TestSendMessageService:
    """Unit tests for SendMessageService."""

    @pytest.fixture
    def service(self, mock_db: AsyncMock) -> SendMessageService:
        """SendMessageService instance."""
        return SendMessageService(mock_db)

    @pytest.fixture
    def conversation(self) -> ConversationResponse:
        now = datetime.now(timezone.utc)
        return ConversationResponse(
            id=uuid4(), name=None, is_group=False, created_at=now, updated_at=now
        )

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_content_rejected(
        self, service: SendMessageService, user_id: UUID, content: str
    ) -> None:
        with patch.object(
            service.message_repo, "add", new_callable=AsyncMock
        ) as mock_add:
            with pytest.raises(ValidationError):
                await service.send_message(
                    user_id, uuid4(), SendMessageRequest(content=content)
                )

            mock_add.assert_not_called()

    async def test_unknown_conversation(
        self, service: SendMessageService, user_id: UUID
    ) -> None:
        with patch.object(
            service.conversation_repo,
            "get_by_id",
            new_callable=AsyncMock,
            return_value=None,
        ):
            with pytest.raises(NotFoundError):
                await service.send_message(
                    user_id, uuid4(), SendMessageRequest(content="hello")
                )

    async def test_non_member_cannot_send(
        self,
        service: SendMessageService,
        conversation: ConversationResponse,
        user_id: UUID,
    ) -> None:
        with (
            patch.object(
                service.conversation_repo,
                "get_by_id",
                new_callable=AsyncMock,
                return_value=conversation,
            ),
            patch.object(
                service.conversation_repo,
                "is_member",
                new_callable=AsyncMock,
                return_value=False,
            ),
            patch.object(
                service.message_repo, "add", new_callable=AsyncMock
            ) as mock_add,
        ):
            with pytest.raises(AuthorizationError):
                await service.send_message(
                    user_id, conversation.id, SendMessageRequest(content="hello")
                )

            mock_add.assert_not_called()


class TestSendMessageServiceWithStore:
    """SendMessageService against the in-memory store."""

    async def test_sent_message_is_returned_and_read_by_sender(
        self,
        test_db: AsyncSession,
        make_user: Callable[..., Awaitable[UserModel]],
    ) -> None:
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        conversation = await ConversationRepository(test_db).create_with_members(
            name=None, is_group=False, member_ids=[alice.id, bob.id]
        )

        service = SendMessageService(test_db)
        message = await service.send_message(
            alice.id,
            conversation.id,
            SendMessageRequest(content="hello", message_type="text"),
        )

        assert message.content == "hello"
        assert message.sender_id == alice.id
        assert message.sender is not None
        assert message.sender.first_name == "Alice"

        receipts = await ReadReceiptRepository(test_db).get_by_message(message.id)
        assert [receipt.user.id for receipt in receipts] == [alice.id]

        # Own messages never count as unread
        conversations = await ConversationRepository(test_db).list_for_user(alice.id)
        assert conversations[0].unread_count == 0
        bob_view = await ConversationRepository(test_db).list_for_user(bob.id)
        assert bob_view[0].unread_count == 1

    async def test_failed_receipt_leaves_no_message(
        self,
        test_db: AsyncSession,
        make_user: Callable[..., Awaitable[UserModel]],
    ) -> None:
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        alice_id, bob_id = alice.id, bob.id
        conversation = await ConversationRepository(test_db).create_with_members(
            name=None, is_group=False, member_ids=[alice_id, bob_id]
        )

        service = SendMessageService(test_db)
        with patch.object(
            service.read_receipt_repo,
            "add",
            new_callable=AsyncMock,
            side_effect=OperationalError("INSERT", {}, Exception("connection lost")),
        ):
            with pytest.raises(OperationalError):
                await service.send_message(
                    alice_id, conversation.id, SendMessageRequest(content="hello")
                )

        # The message, the activity bump and the receipt roll back together
        result = await test_db.execute(select(func.count()).select_from(MessageModel))
        assert result.scalar_one() == 0

        bob_view = await ConversationRepository(test_db).list_for_user(bob_id)
        assert bob_view[0].last_message is None
        assert bob_view[0].unread_count == 0
