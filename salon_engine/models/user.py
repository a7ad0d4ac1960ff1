"""Database model for users."""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Integer, Enum
import enum

from salon_engine.db.database import Base


class UserRole(str, enum.Enum):
    """User role types."""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    A user known to the service.

    Users are identified by an external identity (open_id) supplied by the
    request layer; rows are upserted on each authenticated request.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    open_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=True)
    email = Column(String(320), nullable=True)
    login_method = Column(String(64), nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_signed_in = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, open_id={self.open_id})>"
