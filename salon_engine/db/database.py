"""Database configuration and session management."""

import logging
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///data/salon.db"
SQLITE_BUSY_TIMEOUT_SECONDS = 30


class Database:
    """
    Owns the engine and session factory for one store.

    Built once at process start and handed to whatever needs it
    (the API app, services, tests). There is no module-level engine.

    Usage in FastAPI endpoints:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db here
            pass
    """

    def __init__(self, url: str = DEFAULT_DATABASE_URL, echo: bool = False, engine: Optional[Engine] = None):
        """
        Args:
            url: SQLAlchemy database URL
            echo: Log SQL statements (debugging)
            engine: Pre-built engine (overrides url/echo)
        """
        self.url = url
        self.engine = engine or self._create_engine(url, echo)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if not url.startswith("sqlite"):
            return create_engine(url, echo=echo, pool_pre_ping=True)

        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory data
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo
            )

        db_path = url.replace("sqlite:///", "", 1)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,  # Needed for SQLite
                "timeout": SQLITE_BUSY_TIMEOUT_SECONDS
            },
            echo=echo
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return engine

    def init(self) -> None:
        """
        Create all tables if they don't exist.

        Should be called on application startup.
        """
        # Import all models so they're registered with Base
        from salon_engine import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialized at: {self.engine.url.render_as_string(hide_password=True)}")

    def session(self) -> Iterator[Session]:
        """
        Yield a session and close it afterwards.

        Yields:
            Database session
        """
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
