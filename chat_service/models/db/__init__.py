# SQLAlchemy database models
from .conversation_member_model import ConversationMemberModel
from .conversation_model import ConversationModel
from .message_model import MESSAGE_TYPES, MessageModel
from .read_receipt_model import ReadReceiptModel
from .user_model import UserModel

__all__ = [
    "ConversationMemberModel",
    "ConversationModel",
    "MESSAGE_TYPES",
    "MessageModel",
    "ReadReceiptModel",
    "UserModel",
]
