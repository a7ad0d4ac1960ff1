"""Repository for group chat operations."""

from typing import List, Optional
from sqlalchemy.orm import Session

from salon_engine.models.group_chat import GroupChat, GroupChatParticipant


class GroupChatRepository:
    """Handle database operations for group chats and their participants."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        name: str,
        character_ids: List[int],
        description: Optional[str] = None,
        topic: Optional[str] = None
    ) -> GroupChat:
        """
        Create a group chat together with its participants.

        The chat and its participant rows are committed in one transaction.

        Args:
            user_id: Owner of the group chat
            name: Display name
            character_ids: Participant characters, in roster order
            description: Optional description
            topic: Optional discussion topic

        Returns:
            Created group chat
        """
        group_chat = GroupChat(
            user_id=user_id,
            name=name,
            description=description,
            topic=topic
        )
        for character_id in character_ids:
            group_chat.participants.append(GroupChatParticipant(character_id=character_id))

        self.db.add(group_chat)
        self.db.commit()
        self.db.refresh(group_chat)
        return group_chat

    def get_by_id(self, group_chat_id: int) -> Optional[GroupChat]:
        """
        Get group chat by ID.

        Args:
            group_chat_id: Group chat ID

        Returns:
            GroupChat or None if not found
        """
        return self.db.query(GroupChat).filter(GroupChat.id == group_chat_id).first()

    def list_by_owner(self, user_id: int) -> List[GroupChat]:
        """
        List a user's group chats.

        Args:
            user_id: Owner ID

        Returns:
            List of group chats, newest first
        """
        return (
            self.db.query(GroupChat)
            .filter(GroupChat.user_id == user_id)
            .order_by(GroupChat.id.desc())
            .all()
        )

    def list_participants(self, group_chat_id: int) -> List[GroupChatParticipant]:
        """
        List participants in roster order.

        Args:
            group_chat_id: Group chat ID

        Returns:
            List of participants, in the order they joined
        """
        return (
            self.db.query(GroupChatParticipant)
            .filter(GroupChatParticipant.group_chat_id == group_chat_id)
            .order_by(GroupChatParticipant.id)
            .all()
        )

    def delete(self, group_chat_id: int) -> bool:
        """
        Delete group chat (cascades to participants and messages).

        Args:
            group_chat_id: Group chat ID

        Returns:
            True if deleted, False if not found
        """
        group_chat = self.get_by_id(group_chat_id)
        if not group_chat:
            return False

        self.db.delete(group_chat)
        self.db.commit()
        return True
