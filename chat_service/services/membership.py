from uuid import UUID

from chat_service.errors import AuthorizationError, NotFoundError
from chat_service.models.api.conversations import ConversationResponse
from chat_service.repositories.conversation_repository import ConversationRepository


async def require_membership(
    conversation_repo: ConversationRepository, conversation_id: UUID, user_id: UUID
) -> ConversationResponse:
    """Return the conversation if `user_id` is one of its members.

    Raises NotFoundError for an unknown conversation and AuthorizationError
    when the user is not a member.
    """
    conversation = await conversation_repo.get_by_id(conversation_id)
    if not conversation:
        raise NotFoundError(f"Conversation with ID {conversation_id} not found")
    if not await conversation_repo.is_member(conversation_id, user_id):
        raise AuthorizationError("Access denied")
    return conversation
