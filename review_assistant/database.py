"""
Database setup for AI Code Review Assistant.

SQLAlchemy engine, session factory and the FastAPI session dependency.
"""

import logging
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event, select, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from review_assistant.config import Settings, get_settings

logger = logging.getLogger("code_review.database")

DEFAULT_USER_EMAIL = "developer@localhost"
DEFAULT_USER_NAME = "Default Developer"


class Base(DeclarativeBase):
    """Declarative base for all tables."""


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign keys enabled, and in-memory databases
    share a single connection so every session sees the same data.
    """
    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class Database:
    """Holds the engine and session factory for one process."""

    def __init__(self, settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> None:
        settings = settings or get_settings()
        self.engine = engine or create_db_engine(settings.database_url, echo=settings.sql_echo)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def session(self) -> Session:
        """Open a new session."""
        return self.session_factory()

    def init(self) -> None:
        """Create all tables and seed the default user."""
        from review_assistant.models.tables import User

        Base.metadata.create_all(self.engine)

        with self.session() as session:
            existing = session.scalar(select(User).where(User.email == DEFAULT_USER_EMAIL))
            if existing is None:
                session.add(User(email=DEFAULT_USER_EMAIL, name=DEFAULT_USER_NAME))
                session.commit()
                logger.info(f"Seeded default user {DEFAULT_USER_EMAIL}")

    def check_health(self) -> dict[str, str]:
        """Run a trivial query against the database."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"status": "ok", "message": "Database is responsive"}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "error", "message": str(e)}

    def dispose(self) -> None:
        self.engine.dispose()


_database: Optional[Database] = None


def get_database() -> Database:
    """Get the process-wide database, creating it on first use."""
    global _database
    if _database is None:
        _database = Database()
    return _database


def set_database(database: Optional[Database]) -> None:
    """Replace the process-wide database."""
    global _database
    _database = database


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session."""
    session = get_database().session()
    try:
        yield session
    finally:
        session.close()
