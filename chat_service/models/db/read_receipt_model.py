import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from chat_service.database import Base
from chat_service.models.db._utils import utcnow


class ReadReceiptModel(Base):
    """SQLAlchemy model for message_read_receipts table."""

    __tablename__ = "message_read_receipts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    message_id = Column(
        Uuid(as_uuid=True), ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    read_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    message = relationship("MessageModel", back_populates="read_receipts")
    user = relationship("UserModel")

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_read_receipts_reader"),
    )
