from typing import Awaitable, Callable
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.errors import AuthorizationError, NotFoundError
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.conversation_repository import ConversationRepository
from chat_service.repositories.message_repository import MessageRepository
from chat_service.services.read_receipt_service import ReadReceiptService


class TestReadReceiptService:
    """ReadReceiptService against the in-memory store."""

    @pytest.fixture
    async def setup(
        self,
        test_db: AsyncSession,
        make_user: Callable[..., Awaitable[UserModel]],
    ) -> dict:
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        outsider = await make_user("Eve")
        conversation = await ConversationRepository(test_db).create_with_members(
            name=None, is_group=False, member_ids=[alice.id, bob.id]
        )
        message = await MessageRepository(test_db).create(
            conversation_id=conversation.id, sender_id=alice.id, content="hello"
        )
        return {
            "alice": alice,
            "bob": bob,
            "outsider": outsider,
            "conversation": conversation,
            "message": message,
        }

    async def test_mark_as_read_clears_unread(
        self, test_db: AsyncSession, setup: dict
    ) -> None:
        bob = setup["bob"]
        service = ReadReceiptService(test_db)

        await service.mark_as_read(bob.id, setup["message"].id)

        conversations = await ConversationRepository(test_db).list_for_user(bob.id)
        assert conversations[0].unread_count == 0

    async def test_mark_as_read_twice_keeps_one_receipt(
        self, test_db: AsyncSession, setup: dict
    ) -> None:
        bob = setup["bob"]
        message_id = setup["message"].id
        service = ReadReceiptService(test_db)

        await service.mark_as_read(bob.id, message_id)
        await service.mark_as_read(bob.id, message_id)

        receipts = await service.get_read_receipts(bob.id, message_id)
        assert [receipt.user.id for receipt in receipts] == [bob.id]

    async def test_outsider_cannot_mark_as_read(
        self, test_db: AsyncSession, setup: dict
    ) -> None:
        service = ReadReceiptService(test_db)

        with pytest.raises(AuthorizationError):
            await service.mark_as_read(setup["outsider"].id, setup["message"].id)

    async def test_outsider_cannot_list_receipts(
        self, test_db: AsyncSession, setup: dict
    ) -> None:
        service = ReadReceiptService(test_db)

        with pytest.raises(AuthorizationError):
            await service.get_read_receipts(setup["outsider"].id, setup["message"].id)

    async def test_unknown_message(self, test_db: AsyncSession, setup: dict) -> None:
        service = ReadReceiptService(test_db)

        with pytest.raises(NotFoundError):
            await service.mark_as_read(setup["bob"].id, uuid4())


async def test_mark_as_read_checks_message_before_writing(
    mock_db: AsyncMock, user_id: UUID
) -> None:
    service = ReadReceiptService(mock_db)
    with (
        patch.object(
            service.message_repo, "get_by_id", new_callable=AsyncMock, return_value=None
        ),
        patch.object(
            service.read_receipt_repo, "mark_as_read", new_callable=AsyncMock
        ) as mock_mark,
    ):
        with pytest.raises(NotFoundError):
            await service.mark_as_read(user_id, uuid4())

        mock_mark.assert_not_called()
