"""Repository for message operations."""

import logging
from typing import List
from sqlalchemy.orm import Session

from salon_engine.models.conversation import Message, MessageRole

logger = logging.getLogger(__name__)


class MessageRepository:
    """Handle database operations for one-on-one messages."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, conversation_id: int, role: MessageRole, content: str) -> Message:
        """
        Create a new message.

        The message is committed immediately, so it survives any failure
        later in the same request.

        Args:
            conversation_id: Parent conversation ID
            role: Message role (user/assistant)
            content: Message content

        Returns:
            Created message
        """
        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_by_conversation(self, conversation_id: int) -> List[Message]:
        """
        List all messages in a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            List of messages in storage order (oldest first)
        """
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.id)
            .all()
        )
