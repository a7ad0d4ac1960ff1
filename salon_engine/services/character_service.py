"""Character and knowledge-base management with ownership checks."""

import logging
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from salon_engine.models.character import Character, KnowledgeEntry
from salon_engine.repositories.character_repository import CharacterRepository
from salon_engine.repositories.knowledge_repository import KnowledgeRepository
from salon_engine.services.exceptions import NotFoundError, require_text

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255
TITLE_MAX_LENGTH = 255


def can_read_character(character: Character, user_id: int) -> bool:
    """Owners read their own characters; everyone reads public ones."""
    return character.user_id == user_id or bool(character.is_public)


class CharacterService:
    """
    Character CRUD for one request.

    Access rules:
    - Private characters are visible to their owner only
    - Public characters are readable by every user
    - Only the owner may update, delete, or edit knowledge
    """

    def __init__(self, db: Session):
        self.db = db
        self.characters = CharacterRepository(db)
        self.knowledge = KnowledgeRepository(db)

    def create_character(
        self,
        user_id: int,
        name: str,
        system_prompt: str,
        description: Optional[str] = None,
        avatar_url: Optional[str] = None,
        is_public: bool = False
    ) -> Character:
        """Create a character owned by user_id."""
        require_text(name, "name", NAME_MAX_LENGTH)
        require_text(system_prompt, "system_prompt")

        character = self.characters.create(
            user_id=user_id,
            name=name,
            system_prompt=system_prompt,
            description=description,
            avatar_url=avatar_url,
            is_public=is_public
        )
        logger.info(f"Created character {character.id} ('{character.name}') for user {user_id}")
        return character

    def list_characters(self, user_id: int) -> List[Character]:
        """
        List characters visible to a user.

        Returns the user's own characters followed by other users' public
        characters, without duplicates.
        """
        visible = self.characters.list_by_owner(user_id)
        seen = {character.id for character in visible}
        for character in self.characters.list_public():
            if character.id not in seen:
                visible.append(character)
                seen.add(character.id)
        return visible

    def get_character(self, user_id: int, character_id: int) -> Character:
        """Get a character the user may read (owned or public)."""
        character = self.characters.get_by_id(character_id)
        if not character or not can_read_character(character, user_id):
            raise NotFoundError("Character", character_id)
        return character

    def get_owned_character(self, user_id: int, character_id: int) -> Character:
        """Get a character the user owns."""
        character = self.characters.get_by_id(character_id)
        if not character or character.user_id != user_id:
            raise NotFoundError("Character", character_id)
        return character

    def update_character(self, user_id: int, character_id: int, updates: Dict[str, Any]) -> Character:
        """
        Apply a partial update.

        Args:
            user_id: Requesting user (must own the character)
            character_id: Character ID
            updates: Fields to change; None values are ignored

        Returns:
            Updated character
        """
        self.get_owned_character(user_id, character_id)

        changes = {
            field: value for field, value in updates.items()
            if field in CharacterRepository.UPDATABLE_FIELDS and value is not None
        }
        if "name" in changes:
            require_text(changes["name"], "name", NAME_MAX_LENGTH)
        if "system_prompt" in changes:
            require_text(changes["system_prompt"], "system_prompt")

        character = self.characters.update(character_id, changes)
        logger.info(f"Updated character {character_id}: {sorted(changes)}")
        return character

    def delete_character(self, user_id: int, character_id: int) -> None:
        """Delete an owned character and its knowledge."""
        self.get_owned_character(user_id, character_id)
        self.characters.delete(character_id)
        logger.info(f"Deleted character {character_id}")

    def add_knowledge(
        self,
        user_id: int,
        character_id: int,
        title: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> KnowledgeEntry:
        """Add a knowledge entry to an owned character."""
        self.get_owned_character(user_id, character_id)
        require_text(title, "title", TITLE_MAX_LENGTH)
        require_text(content, "content")

        entry = self.knowledge.create(
            character_id=character_id,
            title=title,
            content=content,
            metadata=metadata
        )
        logger.info(f"Added knowledge entry {entry.id} to character {character_id}")
        return entry

    def list_knowledge(self, user_id: int, character_id: int) -> List[KnowledgeEntry]:
        """List knowledge of a character the user may read."""
        self.get_character(user_id, character_id)
        return self.knowledge.list_by_character(character_id)

    def delete_knowledge(self, user_id: int, character_id: int, entry_id: int) -> None:
        """Delete a knowledge entry belonging to an owned character."""
        self.get_owned_character(user_id, character_id)
        entry = self.knowledge.get_by_id(entry_id)
        if not entry or entry.character_id != character_id:
            raise NotFoundError("Knowledge entry", entry_id)

        self.knowledge.delete(entry_id)
        logger.info(f"Deleted knowledge entry {entry_id} from character {character_id}")
