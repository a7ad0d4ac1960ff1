"""Database models for multi-character group chats."""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship

from salon_engine.db.database import Base


class GroupChat(Base):
    """
    A discussion between one user and several characters.

    Group chats have:
    - An optional topic injected into every character's system prompt
    - Two or more participant characters
    - A shared message history (human and character turns)
    """
    __tablename__ = "group_chats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)  # Creator of the group chat
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    topic = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    participants = relationship(
        "GroupChatParticipant",
        back_populates="group_chat",
        cascade="all, delete-orphan",
        order_by="GroupChatParticipant.id"
    )
    messages = relationship(
        "GroupChatMessage",
        back_populates="group_chat",
        cascade="all, delete-orphan",
        order_by="GroupChatMessage.id"
    )

    def __repr__(self):
        return f"<GroupChat(id={self.id}, name={self.name}, owner={self.user_id})>"


class GroupChatParticipant(Base):
    """A character taking part in a group chat."""
    __tablename__ = "group_chat_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_chat_id = Column(Integer, ForeignKey("group_chats.id", ondelete="CASCADE"), nullable=False, index=True)
    character_id = Column(Integer, nullable=False)
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    group_chat = relationship("GroupChat", back_populates="participants")

    def __repr__(self):
        return f"<GroupChatParticipant(group_chat={self.group_chat_id}, character={self.character_id})>"


class GroupChatMessage(Base):
    """
    A message in a group chat.

    character_id is None for turns written by the human user.
    """
    __tablename__ = "group_chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_chat_id = Column(Integer, ForeignKey("group_chats.id", ondelete="CASCADE"), nullable=False, index=True)
    character_id = Column(Integer, nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    group_chat = relationship("GroupChat", back_populates="messages")

    def __repr__(self):
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"<GroupChatMessage(id={self.id}, character={self.character_id}, content={preview})>"
