"""Database package for Salon Engine."""

from .database import Base, Database, DEFAULT_DATABASE_URL

__all__ = ["Base", "Database", "DEFAULT_DATABASE_URL"]
