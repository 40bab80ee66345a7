# API models for request/response contracts
from .conversations import (
    ConversationMemberResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
    CreateDirectConversationRequest,
)
from .messages import MessageResponse, ReadReceiptResponse, SendMessageRequest
from .users import (
    SuccessResponse,
    UpdateStatusRequest,
    UpsertUserRequest,
    UserResponse,
)

__all__ = [
    "ConversationMemberResponse",
    "ConversationResponse",
    "ConversationSummaryResponse",
    "CreateConversationRequest",
    "CreateDirectConversationRequest",
    "MessageResponse",
    "ReadReceiptResponse",
    "SendMessageRequest",
    "SuccessResponse",
    "UpdateStatusRequest",
    "UpsertUserRequest",
    "UserResponse",
]
