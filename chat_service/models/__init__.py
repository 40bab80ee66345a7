# Export all models
from .api import (
    ConversationMemberResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
    CreateDirectConversationRequest,
    MessageResponse,
    ReadReceiptResponse,
    SendMessageRequest,
    SuccessResponse,
    UpdateStatusRequest,
    UpsertUserRequest,
    UserResponse,
)
from .db import (
    ConversationMemberModel,
    ConversationModel,
    MessageModel,
    ReadReceiptModel,
    UserModel,
)

__all__ = [
    # API models
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
    # DB models
    "ConversationMemberModel",
    "ConversationModel",
    "MessageModel",
    "ReadReceiptModel",
    "UserModel",
]
