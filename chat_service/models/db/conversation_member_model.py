import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from chat_service.database import Base
from chat_service.models.db._utils import utcnow


class ConversationMemberModel(Base):
    """SQLAlchemy model for conversation_members table."""

    __tablename__ = "conversation_members"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    conversation = relationship("ConversationModel", back_populates="members")
    user = relationship("UserModel", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "user_id", name="uq_conversation_members_member"
        ),
        Index("idx_conversation_members_user", "user_id"),
    )
