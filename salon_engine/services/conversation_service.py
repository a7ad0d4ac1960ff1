"""One-on-one conversation management with ownership checks."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from salon_engine.models.conversation import Conversation, Message
from salon_engine.repositories.conversation_repository import ConversationRepository
from salon_engine.repositories.message_repository import MessageRepository
from salon_engine.services.character_service import CharacterService
from salon_engine.services.exceptions import NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


class ConversationService:
    """Conversation CRUD for one request. Conversations are private to their owner."""

    def __init__(self, db: Session):
        self.db = db
        self.conversations = ConversationRepository(db)
        self.messages = MessageRepository(db)
        self.character_service = CharacterService(db)

    def create_conversation(self, user_id: int, character_id: int, title: Optional[str] = None) -> Conversation:
        """
        Start a conversation with a character the user can read.

        Raises:
            NotFoundError: If the character does not exist or is private to someone else
        """
        if title is not None and len(title) > TITLE_MAX_LENGTH:
            raise ValidationFailure("title", f"must be at most {TITLE_MAX_LENGTH} characters")
        self.character_service.get_character(user_id, character_id)

        conversation = self.conversations.create(
            user_id=user_id,
            character_id=character_id,
            title=title
        )
        logger.info(f"Created conversation {conversation.id} with character {character_id} for user {user_id}")
        return conversation

    def list_conversations(self, user_id: int) -> List[Conversation]:
        """List the user's conversations."""
        return self.conversations.list_by_owner(user_id)

    def get_conversation(self, user_id: int, conversation_id: int) -> Conversation:
        """Get an owned conversation."""
        conversation = self.conversations.get_by_id(conversation_id)
        if not conversation or conversation.user_id != user_id:
            raise NotFoundError("Conversation", conversation_id)
        return conversation

    def delete_conversation(self, user_id: int, conversation_id: int) -> None:
        """Delete an owned conversation and its messages."""
        self.get_conversation(user_id, conversation_id)
        self.conversations.delete(conversation_id)
        logger.info(f"Deleted conversation {conversation_id}")

    def list_messages(self, user_id: int, conversation_id: int) -> List[Message]:
        """List an owned conversation's messages, oldest first."""
        self.get_conversation(user_id, conversation_id)
        return self.messages.list_by_conversation(conversation_id)
