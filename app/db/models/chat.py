from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from app.db.base import Base, generate_id, utcnow


class Chat(Base):
    """Two-participant thread. The id is the sorted participant pair joined by '_'."""
    __tablename__ = "chats"

    id = Column(String(80), primary_key=True)
    participants = Column(JSON, nullable=False)
    # Denormalized for "chats containing user" lookups without JSON operators
    user_a_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    messages = relationship(
        "Message",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="Message.timestamp",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    chat_id = Column(String(80), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    chat = relationship("Chat", back_populates="messages")

    __table_args__ = (
        Index("idx_message_chat_timestamp", "chat_id", "timestamp"),
    )
