"""Database models for one-on-one conversations and messages."""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum, Integer
from sqlalchemy.orm import relationship
import enum

from salon_engine.db.database import Base


class MessageRole(str, enum.Enum):
    """Message role types."""
    USER = "user"
    ASSISTANT = "assistant"


class Conversation(Base):
    """
    A conversation is one user's private message history with one character.

    character_id is not a foreign key: deleting a character
    leaves its conversations in place, and chatting in them fails cleanly.
    """
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    character_id = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id"
    )

    def __repr__(self):
        return f"<Conversation(id={self.id}, character={self.character_id}, title={self.title})>"


class Message(Base):
    """
    A single exchange in a conversation.

    Messages are immutable once written; their id gives the history order.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MessageRole), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self):
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"<Message(id={self.id}, role={self.role}, content={preview})>"
