"""Repository for character operations."""

from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy.orm import Session

from salon_engine.models.character import Character


class CharacterRepository:
    """Handle database operations for characters."""

    # Columns a caller may change through update()
    UPDATABLE_FIELDS = ("name", "description", "system_prompt", "avatar_url", "is_public")

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        name: str,
        system_prompt: str,
        description: Optional[str] = None,
        avatar_url: Optional[str] = None,
        is_public: bool = False
    ) -> Character:
        """
        Create a new character.

        Args:
            user_id: Owner of the character
            name: Display name
            system_prompt: Base instructions for the LLM
            description: Optional description
            avatar_url: Optional avatar reference
            is_public: Whether other users can read this character

        Returns:
            Created character
        """
        character = Character(
            user_id=user_id,
            name=name,
            system_prompt=system_prompt,
            description=description,
            avatar_url=avatar_url,
            is_public=is_public
        )
        self.db.add(character)
        self.db.commit()
        self.db.refresh(character)
        return character

    def get_by_id(self, character_id: int) -> Optional[Character]:
        """
        Get character by ID.

        Args:
            character_id: Character ID

        Returns:
            Character or None if not found
        """
        return self.db.query(Character).filter(Character.id == character_id).first()

    def get_many(self, character_ids: List[int]) -> Dict[int, Character]:
        """
        Fetch several characters at once.

        Args:
            character_ids: Character IDs

        Returns:
            Dict of {character_id: character} for the IDs that exist
        """
        if not character_ids:
            return {}
        characters = self.db.query(Character).filter(Character.id.in_(character_ids)).all()
        return {character.id: character for character in characters}

    def list_by_owner(self, user_id: int) -> List[Character]:
        """
        List characters created by a user.

        Args:
            user_id: Owner ID

        Returns:
            List of characters, oldest first
        """
        return (
            self.db.query(Character)
            .filter(Character.user_id == user_id)
            .order_by(Character.id)
            .all()
        )

    def list_public(self) -> List[Character]:
        """
        List every public character.

        Returns:
            List of characters, oldest first
        """
        return (
            self.db.query(Character)
            .filter(Character.is_public.is_(True))
            .order_by(Character.id)
            .all()
        )

    def update(self, character_id: int, updates: Dict[str, Any]) -> Optional[Character]:
        """
        Update character fields.

        Args:
            character_id: Character ID
            updates: Mapping of field name to new value (unknown fields ignored)

        Returns:
            Updated character or None if not found
        """
        character = self.get_by_id(character_id)
        if not character:
            return None

        for field, value in updates.items():
            if field in self.UPDATABLE_FIELDS:
                setattr(character, field, value)

        character.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(character)
        return character

    def delete(self, character_id: int) -> bool:
        """
        Delete character (cascades to knowledge entries).

        Args:
            character_id: Character ID

        Returns:
            True if deleted, False if not found
        """
        character = self.get_by_id(character_id)
        if not character:
            return False

        self.db.delete(character)
        self.db.commit()
        return True
