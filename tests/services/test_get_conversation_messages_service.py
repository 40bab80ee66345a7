from datetime import datetime, timezone
from typing import List
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest

from chat_service.config import DEFAULT_MESSAGE_LIMIT, MAX_MESSAGE_LIMIT
from chat_service.errors import AuthorizationError, NotFoundError, ValidationError
from chat_service.models.api.conversations import ConversationResponse
from chat_service.models.api.messages import MessageResponse
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.services.get_conversation_messages_service import (
    GetConversationMessagesService,
)


class TestGetConversationMessagesService:
    """Unit tests for GetConversationMessagesService."""

    @pytest.fixture
    def service(self, mock_db: AsyncMock) -> GetConversationMessagesService:
        """GetConversationMessagesService instance."""
        return GetConversationMessagesService(mock_db)

    @pytest.fixture
    def conversation(self) -> ConversationResponse:
        now = datetime.now(timezone.utc)
        return ConversationResponse(
            id=uuid4(), name=None, is_group=False, created_at=now, updated_at=now
        )

    @pytest.fixture
    def sample_messages(self, conversation: ConversationResponse) -> List[MessageResponse]:
        """Sample message responses."""
        now = datetime.now(timezone.utc)
        return [
            MessageResponse(
                id=uuid4(),
                conversation_id=conversation.id,
                sender_id=uuid4(),
                content=content,
                message_type="text",
                is_edited=False,
                created_at=now,
                updated_at=now,
            )
            for content in ("Hello", "Hi there")
        ]

    def test_service_initialization(self, mock_db: AsyncMock) -> None:
        """Test that the service initializes correctly."""
        service = GetConversationMessagesService(mock_db)
        assert service.db == mock_db
        assert isinstance(service.conversation_repo, ConversationRepository)
        assert isinstance(service.message_repo, MessageRepository)

    async def test_get_conversation_messages_success(
        self,
        service: GetConversationMessagesService,
        conversation: ConversationResponse,
        sample_messages: List[MessageResponse],
        user_id: UUID,
    ) -> None:
        with (
            patch.object(
                service.conversation_repo,
                "get_by_id",
                new_callable=AsyncMock,
                return_value=conversation,
            ) as mock_get_conversation,
            patch.object(
                service.conversation_repo,
                "is_member",
                new_callable=AsyncMock,
                return_value=True,
            ) as mock_is_member,
            patch.object(
                service.message_repo,
                "get_by_conversation",
                new_callable=AsyncMock,
                return_value=sample_messages,
            ) as mock_get_messages,
        ):
            result = await service.get_conversation_messages(user_id, conversation.id)

            mock_get_conversation.assert_called_once_with(conversation.id)
            mock_is_member.assert_called_once_with(conversation.id, user_id)
            mock_get_messages.assert_called_once_with(
                conversation.id, limit=DEFAULT_MESSAGE_LIMIT
            )
            assert result == sample_messages

    async def test_get_conversation_messages_custom_limit(
        self,
        service: GetConversationMessagesService,
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
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "get_by_conversation",
                new_callable=AsyncMock,
                return_value=[],
            ) as mock_get_messages,
        ):
            await service.get_conversation_messages(user_id, conversation.id, limit=5)

            mock_get_messages.assert_called_once_with(conversation.id, limit=5)

    async def test_get_conversation_messages_conversation_not_found(
        self, service: GetConversationMessagesService, user_id: UUID
    ) -> None:
        with patch.object(
            service.conversation_repo,
            "get_by_id",
            new_callable=AsyncMock,
            return_value=None,
        ):
            with pytest.raises(NotFoundError):
                await service.get_conversation_messages(user_id, uuid4())

    async def test_get_conversation_messages_not_a_member(
        self,
        service: GetConversationMessagesService,
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
                service.message_repo, "get_by_conversation", new_callable=AsyncMock
            ) as mock_get_messages,
        ):
            with pytest.raises(AuthorizationError):
                await service.get_conversation_messages(user_id, conversation.id)

            mock_get_messages.assert_not_called()

    @pytest.mark.parametrize("limit", [0, -1, MAX_MESSAGE_LIMIT + 1])
    async def test_get_conversation_messages_invalid_limit(
        self, service: GetConversationMessagesService, user_id: UUID, limit: int
    ) -> None:
        with patch.object(
            service.conversation_repo, "get_by_id", new_callable=AsyncMock
        ) as mock_get_conversation:
            with pytest.raises(ValidationError):
                await service.get_conversation_messages(user_id, uuid4(), limit=limit)

            mock_get_conversation.assert_not_called()
