# backend/chatline/models/message.py
"""
Message model for direct messages between two users.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Message(Base):
    """
    Direct message from ``sender_id`` to ``receiver_id``.

    ``is_read`` flips to True when the receiver marks the conversation as read.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_sender_receiver_read", "sender_id", "receiver_id", "is_read"),
    )

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    text = Column(Text, nullable=False)
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
