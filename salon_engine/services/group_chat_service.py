"""Group chat management with ownership checks."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from salon_engine.models.character import Character
from salon_engine.models.group_chat import GroupChat, GroupChatMessage
from salon_engine.repositories.character_repository import CharacterRepository
from salon_engine.repositories.group_chat_repository import GroupChatRepository
from salon_engine.repositories.group_message_repository import GroupMessageRepository
from salon_engine.services.character_service import can_read_character
from salon_engine.services.exceptions import NotFoundError, ValidationFailure, require_text

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255
MIN_PARTICIPANTS = 2


class GroupChatService:
    """Group chat CRUD and human turns for one request. Group chats are private to their owner."""

    def __init__(self, db: Session):
        self.db = db
        self.group_chats = GroupChatRepository(db)
        self.group_messages = GroupMessageRepository(db)
        self.characters = CharacterRepository(db)

    def create_group_chat(
        self,
        user_id: int,
        name: str,
        character_ids: List[int],
        description: Optional[str] = None,
        topic: Optional[str] = None
    ) -> GroupChat:
        """
        Create a group chat with at least two distinct characters.

        Repeated ids are collapsed (first occurrence keeps its position).
        Nothing is written unless every check passes.

        Raises:
            ValidationFailure: Blank name or fewer than two distinct characters
            NotFoundError: A participant does not exist or is not readable
        """
        require_text(name, "name", NAME_MAX_LENGTH)

        distinct_ids = list(dict.fromkeys(character_ids or []))
        if len(distinct_ids) < MIN_PARTICIPANTS:
            raise ValidationFailure(
                "character_ids",
                f"a group chat needs at least {MIN_PARTICIPANTS} distinct characters"
            )

        found = self.characters.get_many(distinct_ids)
        for character_id in distinct_ids:
            character = found.get(character_id)
            if not character or not can_read_character(character, user_id):
                raise NotFoundError("Character", character_id)

        group_chat = self.group_chats.create(
            user_id=user_id,
            name=name,
            character_ids=distinct_ids,
            description=description,
            topic=topic
        )
        logger.info(f"Created group chat {group_chat.id} with characters {distinct_ids} for user {user_id}")
        return group_chat

    def list_group_chats(self, user_id: int) -> List[GroupChat]:
        """List the user's group chats."""
        return self.group_chats.list_by_owner(user_id)

    def get_group_chat(self, user_id: int, group_chat_id: int) -> GroupChat:
        """Get an owned group chat."""
        group_chat = self.group_chats.get_by_id(group_chat_id)
        if not group_chat or group_chat.user_id != user_id:
            raise NotFoundError("Group chat", group_chat_id)
        return group_chat

    def get_participant_characters(self, group_chat_id: int) -> List[Optional[Character]]:
        """
        Resolve participants to characters in roster order.

        Deleted characters come back as None so callers can decide whether
        to drop them.
        """
        participant_ids = [p.character_id for p in self.group_chats.list_participants(group_chat_id)]
        found = self.characters.get_many(participant_ids)
        return [found.get(character_id) for character_id in participant_ids]

    def delete_group_chat(self, user_id: int, group_chat_id: int) -> None:
        """Delete an owned group chat with its participants and messages."""
        self.get_group_chat(user_id, group_chat_id)
        self.group_chats.delete(group_chat_id)
        logger.info(f"Deleted group chat {group_chat_id}")

    def list_messages(self, user_id: int, group_chat_id: int) -> List[GroupChatMessage]:
        """List an owned group chat's messages, oldest first."""
        self.get_group_chat(user_id, group_chat_id)
        return self.group_messages.list_by_group_chat(group_chat_id)

    def send_message(self, user_id: int, group_chat_id: int, content: str) -> GroupChatMessage:
        """
        Post a human turn. No LLM call is made.

        Raises:
            ValidationFailure: Blank content
            NotFoundError: Group chat missing or not owned
        """
        require_text(content, "content")
        self.get_group_chat(user_id, group_chat_id)

        message = self.group_messages.create(group_chat_id=group_chat_id, content=content)
        logger.debug(f"User {user_id} posted message {message.id} to group chat {group_chat_id}")
        return message
