"""Repository for conversation operations."""

from typing import List, Optional
from sqlalchemy.orm import Session

from salon_engine.models.conversation import Conversation


class ConversationRepository:
    """Handle database operations for conversations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, character_id: int, title: Optional[str] = None) -> Conversation:
        """
        Create a new conversation.

        Args:
            user_id: Owner of the conversation
            character_id: The character this conversation is with
            title: Optional title

        Returns:
            Created conversation
        """
        conversation = Conversation(
            user_id=user_id,
            character_id=character_id,
            title=title
        )
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def get_by_id(self, conversation_id: int) -> Optional[Conversation]:
        """
        Get conversation by ID.

        Args:
            conversation_id: Conversation ID

        Returns:
            Conversation or None if not found
        """
        return self.db.query(Conversation).filter(Conversation.id == conversation_id).first()

    def list_by_owner(self, user_id: int) -> List[Conversation]:
        """
        List all of a user's conversations.

        Args:
            user_id: Owner ID

        Returns:
            List of conversations, newest first
        """
        return (
            self.db.query(Conversation)
            .filter(Conversation.user_id == user_id)
            .order_by(Conversation.id.desc())
            .all()
        )

    def delete(self, conversation_id: int) -> bool:
        """
        Delete conversation (cascades to messages).

        Args:
            conversation_id: Conversation ID

        Returns:
            True if deleted, False if not found
        """
        conversation = self.get_by_id(conversation_id)
        if not conversation:
            return False

        self.db.delete(conversation)
        self.db.commit()
        return True
