"""Repository for user operations."""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from salon_engine.models.user import User


class UserRepository:
    """Handle database operations for users."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None if not found
        """
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_open_id(self, open_id: str) -> Optional[User]:
        """
        Get user by external identity.

        Args:
            open_id: External identity string

        Returns:
            User or None if not found
        """
        return self.db.query(User).filter(User.open_id == open_id).first()

    def upsert(
        self,
        open_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        login_method: Optional[str] = None
    ) -> User:
        """
        Create the user or refresh an existing one.

        Only fields that are provided overwrite stored values; last_signed_in
        is always refreshed.

        Args:
            open_id: External identity string (required)
            name: Display name
            email: Email address
            login_method: How the user authenticated

        Returns:
            Created or updated user
        """
        if not open_id:
            raise ValueError("User open_id is required for upsert")

        now = datetime.utcnow()
        user = self.get_by_open_id(open_id)
        if user is None:
            user = User(open_id=open_id, last_signed_in=now)
            self.db.add(user)

        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if login_method is not None:
            user.login_method = login_method
        user.last_signed_in = now

        self.db.commit()
        self.db.refresh(user)
        return user
