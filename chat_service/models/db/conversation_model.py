import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, String, Uuid
from sqlalchemy.orm import relationship

from chat_service.database import Base
from chat_service.models.db._utils import utcnow


class ConversationModel(Base):
    """SQLAlchemy model for conversations table."""

    __tablename__ = "conversations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255))
    is_group = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Touched on every new message; drives "most recent activity first"
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    messages = relationship(
        "MessageModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    members = relationship(
        "ConversationMemberModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_conversations_updated_at", "updated_at"),)
