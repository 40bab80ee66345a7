# Repository classes for database operations
from .base_repository import BaseRepository
from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .read_receipt_repository import ReadReceiptRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "MessageRepository",
    "ReadReceiptRepository",
    "UserRepository",
]
