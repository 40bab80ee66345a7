from types import TracebackType
from typing import Any, List, Optional, Type
from uuid import UUID

import httpx

from chat_service.auth import USER_ID_HEADER
from chat_service.models.api.conversations import (
    ConversationResponse,
    ConversationSummaryResponse,
)
from chat_service.models.api.messages import MessageResponse, ReadReceiptResponse
from chat_service.models.api.users import UserResponse


class ChatApiClient:
    """HTTP client for the chat service API using httpx."""

    def __init__(
        self,
        base_url: str,
        user_id: UUID,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self.user_id = user_id
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={USER_ID_HEADER: str(user_id)},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_current_user(self) -> UserResponse:
        data = await self._request("GET", "/api/auth/user")
        return UserResponse.model_validate(data)

    async def update_status(self, is_online: bool) -> None:
        await self._request("POST", "/api/users/status", json={"isOnline": is_online})

    async def list_conversations(self) -> List[ConversationSummaryResponse]:
        data = await self._request("GET", "/api/conversations")
        return [ConversationSummaryResponse.model_validate(item) for item in data]

    async def create_conversation(
        self, member_ids: List[UUID], name: Optional[str] = None, is_group: bool = False
    ) -> ConversationResponse:
        payload = {
            "name": name,
            "isGroup": is_group,
            "memberIds": [str(member_id) for member_id in member_ids],
        }
        data = await self._request("POST", "/api/conversations", json=payload)
        return ConversationResponse.model_validate(data)

    async def create_direct_conversation(
        self, other_user_id: UUID
    ) -> ConversationResponse:
        data = await self._request(
            "POST",
            "/api/conversations/direct",
            json={"otherUserId": str(other_user_id)},
        )
        return ConversationResponse.model_validate(data)

    async def get_messages(
        self, conversation_id: UUID, limit: Optional[int] = None
    ) -> List[MessageResponse]:
        params = {"limit": limit} if limit is not None else None
        data = await self._request(
            "GET", f"/api/conversations/{conversation_id}/messages", params=params
        )
        return [MessageResponse.model_validate(item) for item in data]

    async def send_message(
        self, conversation_id: UUID, content: str, message_type: str = "text"
    ) -> MessageResponse:
        data = await self._request(
            "POST",
            f"/api/conversations/{conversation_id}/messages",
            json={"content": content, "messageType": message_type},
        )
        return MessageResponse.model_validate(data)

    async def mark_as_read(self, message_id: UUID) -> None:
        await self._request("POST", f"/api/messages/{message_id}/read")

    async def get_read_receipts(self, message_id: UUID) -> List[ReadReceiptResponse]:
        data = await self._request("GET", f"/api/messages/{message_id}/receipts")
        return [ReadReceiptResponse.model_validate(item) for item in data]

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises httpx.HTTPStatusError for non-2xx responses.
        """
        response = await self.client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()
