"""Database models for characters and their knowledge entries."""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Integer, Boolean
from sqlalchemy.orm import relationship

from salon_engine.db.database import Base


class Character(Base):
    """
    A configured AI persona.

    Each character:
    - Belongs to the user who created it
    - Has base instructions (system_prompt) sent first to the LLM
    - Can be public (readable by every user) or private
    - Owns a small knowledge base of titled snippets
    """
    __tablename__ = "characters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)  # Creator of the character
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    system_prompt = Column(Text, nullable=False)
    avatar_url = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    knowledge = relationship(
        "KnowledgeEntry",
        back_populates="character",
        cascade="all, delete-orphan",
        order_by="KnowledgeEntry.id"
    )

    def __repr__(self):
        return f"<Character(id={self.id}, name={self.name}, owner={self.user_id})>"


class KnowledgeEntry(Base):
    """
    A titled text snippet in a character's knowledge base.

    Entries are matched against chat text by keyword before each reply
    and injected into the system prompt.
    """
    __tablename__ = "character_knowledge"

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    meta_data = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    character = relationship("Character", back_populates="knowledge")

    def __repr__(self):
        return f"<KnowledgeEntry(id={self.id}, character={self.character_id}, title={self.title})>"
