"""Polling synchronization of a client's local view with the chat service.

The conversation list and the active conversation's messages are refreshed
on independent timers. Sent messages show up immediately as pending and are
reconciled against the server's copy on the next poll.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Union
from uuid import UUID, uuid4

import httpx

from chat_service.clients.chat_api_client import ChatApiClient
from chat_service.models.api.conversations import ConversationSummaryResponse
from chat_service.models.api.messages import MessageResponse

logger = logging.getLogger(__name__)

CONVERSATIONS_POLL_INTERVAL = 3.0
MESSAGES_POLL_INTERVAL = 2.0


@dataclass
class PendingMessage:
    """A locally sent message the server has not acknowledged."""

    conversation_id: UUID
    sender_id: UUID
    content: str
    message_type: str = "text"
    local_id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = "pending"  # 'pending' or 'failed'


DisplayMessage = Union[MessageResponse, PendingMessage]


class ConversationSync:
    """Keeps a local cache of conversations and the active conversation's messages."""

    def __init__(
        self,
        api: ChatApiClient,
        conversations_interval: float = CONVERSATIONS_POLL_INTERVAL,
        messages_interval: float = MESSAGES_POLL_INTERVAL,
    ):
        self.api = api
        self.user_id = api.user_id
        self.conversations_interval = conversations_interval
        self.messages_interval = messages_interval

        self.conversations: List[ConversationSummaryResponse] = []
        self.active_conversation_id: Optional[UUID] = None

        self._server_messages: List[MessageResponse] = []
        # Acknowledged by the server but not yet seen in a poll result
        self._confirmed: Dict[UUID, MessageResponse] = {}
        self._pending: List[PendingMessage] = []

        self._generation = 0
        self._inflight_fetch: Optional["asyncio.Future[List[MessageResponse]]"] = None
        self._conversations_wakeup = asyncio.Event()
        self._messages_wakeup = asyncio.Event()
        self._tasks: List["asyncio.Task[None]"] = []

    @property
    def messages(self) -> List[DisplayMessage]:
        """Server messages, then acknowledged sends, then pending/failed sends."""
        return [*self._server_messages, *self._confirmed.values(), *self._pending]

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        """Report the user online and start both poll timers."""
        await self.api.update_status(True)
        self._tasks = [
            asyncio.create_task(
                self._poll_forever(
                    self.refresh_conversations,
                    self.conversations_interval,
                    self._conversations_wakeup,
                )
            ),
            asyncio.create_task(
                self._poll_forever(
                    self.refresh_messages, self.messages_interval, self._messages_wakeup
                )
            ),
        ]

    async def stop(self) -> None:
        """Stop polling and report the user offline."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        try:
            await self.api.update_status(False)
        except httpx.HTTPError as e:
            logger.warning("Failed to report offline status: %s", e)

    def select_conversation(self, conversation_id: Optional[UUID]) -> None:
        """Switch the active conversation, abandoning any in-flight message poll."""
        if conversation_id == self.active_conversation_id:
            return

        if self._inflight_fetch is not None:
            self._inflight_fetch.cancel()
            self._inflight_fetch = None

        self._generation += 1
        self.active_conversation_id = conversation_id
        self._server_messages = []
        self._confirmed = {}
        self._pending = []
        self._messages_wakeup.set()

    async def refresh_conversations(self) -> None:
        self.conversations = await self.api.list_conversations()

    async def refresh_messages(self) -> None:
        """Fetch the active conversation's messages and merge them into the cache.

        Results for a conversation that is no longer active are dropped.
        """
        conversation_id = self.active_conversation_id
        if conversation_id is None:
            return

        generation = self._generation
        fetch = asyncio.ensure_future(self.api.get_messages(conversation_id))
        self._inflight_fetch = fetch
        try:
            messages = await fetch
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Abandoned message poll for conversation %s", conversation_id)
            return
        finally:
            if self._inflight_fetch is fetch:
                self._inflight_fetch = None

        if generation != self._generation:
            return
        self._apply_server_messages(messages)

    async def send_message(
        self, content: str, message_type: str = "text"
    ) -> MessageResponse:
        """Send to the active conversation with an optimistic local copy.

        The pending copy is replaced by the server's message on success and
        marked failed on error; the error is re-raised.
        """
        conversation_id = self.active_conversation_id
        if conversation_id is None:
            raise RuntimeError("No conversation selected")

        pending = PendingMessage(
            conversation_id=conversation_id,
            sender_id=self.user_id,
            content=content,
            message_type=message_type,
        )
        self._pending.append(pending)

        try:
            message = await self.api.send_message(
                conversation_id, content, message_type
            )
        except BaseException:
            pending.status = "failed"
            raise

        if pending in self._pending:
            self._pending.remove(pending)
        if conversation_id == self.active_conversation_id and not any(
            existing.id == message.id for existing in self._server_messages
        ):
            self._confirmed[message.id] = message

        self._messages_wakeup.set()
        self._conversations_wakeup.set()
        return message

    def discard_failed(self) -> None:
        """Drop every local message that failed to send."""
        self._pending = [p for p in self._pending if p.status != "failed"]

    def _apply_server_messages(self, messages: List[MessageResponse]) -> None:
        self._server_messages = messages
        seen = {message.id for message in messages}
        for message_id in list(self._confirmed):
            if message_id in seen:
                del self._confirmed[message_id]

    async def _poll_forever(
        self,
        refresh: Callable[[], Awaitable[None]],
        interval: float,
        wakeup: asyncio.Event,
    ) -> None:
        while True:
            wakeup.clear()
            try:
                await refresh()
            except httpx.HTTPError as e:
                logger.warning("Poll failed: %s", e)
            except ValueError:
                # Undecodable body or a payload that fails validation
                logger.exception("Poll returned an unusable response")

            try:
                await asyncio.wait_for(wakeup.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
