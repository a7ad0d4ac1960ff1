"""Repository for group chat message operations."""

from typing import List, Optional
from sqlalchemy.orm import Session

from salon_engine.models.group_chat import GroupChatMessage


class GroupMessageRepository:
    """Handle database operations for group chat messages."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, group_chat_id: int, content: str, character_id: Optional[int] = None) -> GroupChatMessage:
        """
        Create a new group message.

        Args:
            group_chat_id: Parent group chat ID
            content: Message content
            character_id: Authoring character, or None for the human user

        Returns:
            Created message
        """
        message = GroupChatMessage(
            group_chat_id=group_chat_id,
            character_id=character_id,
            content=content
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_by_group_chat(self, group_chat_id: int) -> List[GroupChatMessage]:
        """
        List all messages in a group chat.

        Args:
            group_chat_id: Group chat ID

        Returns:
            List of messages in storage order (oldest first)
        """
        return (
            self.db.query(GroupChatMessage)
            .filter(GroupChatMessage.group_chat_id == group_chat_id)
            .order_by(GroupChatMessage.id)
            .all()
        )

    def list_recent(self, group_chat_id: int, limit: int) -> List[GroupChatMessage]:
        """
        Get the most recent N messages.

        Args:
            group_chat_id: Group chat ID
            limit: Number of most recent messages to return

        Returns:
            List of messages, ordered oldest first
        """
        if limit <= 0:
            return []

        # Get the most recent N messages by ordering DESC, limiting, then reversing
        messages = (
            self.db.query(GroupChatMessage)
            .filter(GroupChatMessage.group_chat_id == group_chat_id)
            .order_by(GroupChatMessage.id.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(messages))
