"""Repository for character knowledge operations."""

from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from salon_engine.models.character import KnowledgeEntry


class KnowledgeRepository:
    """Handle database operations for knowledge entries."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        character_id: int,
        title: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> KnowledgeEntry:
        """
        Add a knowledge entry to a character.

        Args:
            character_id: Owning character
            title: Entry title
            content: Entry text
            metadata: Optional free-form metadata

        Returns:
            Created entry
        """
        entry = KnowledgeEntry(
            character_id=character_id,
            title=title,
            content=content,
            meta_data=metadata
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[KnowledgeEntry]:
        """
        Get knowledge entry by ID.

        Args:
            entry_id: Entry ID

        Returns:
            Entry or None if not found
        """
        return self.db.query(KnowledgeEntry).filter(KnowledgeEntry.id == entry_id).first()

    def list_by_character(self, character_id: int) -> List[KnowledgeEntry]:
        """
        List a character's knowledge in storage order.

        Args:
            character_id: Character ID

        Returns:
            List of entries, oldest first
        """
        return (
            self.db.query(KnowledgeEntry)
            .filter(KnowledgeEntry.character_id == character_id)
            .order_by(KnowledgeEntry.id)
            .all()
        )

    def delete(self, entry_id: int) -> bool:
        """
        Delete a knowledge entry.

        Args:
            entry_id: Entry ID

        Returns:
            True if deleted, False if not found
        """
        entry = self.get_by_id(entry_id)
        if not entry:
            return False

        self.db.delete(entry)
        self.db.commit()
        return True
