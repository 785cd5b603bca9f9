#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy.orm import Session

from core.storage import LocalFileStorage
from database.database import create_db_engine, create_session_factory
from notification.service import NotificationService
from .config import AppConfig, get_config


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, url: str):
        self.engine = create_db_engine(url)
        self.SessionLocal = create_session_factory(self.engine)

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Global database manager, created on first use."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(get_config().database.url)
    return _db_manager


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: Database session that will be automatically closed.
    """
    yield from get_db_manager().get_session()


def get_db_engine():
    """Get the database engine (for advanced use cases)."""
    return get_db_manager().engine


def get_app_config() -> AppConfig:
    return get_config()


@lru_cache()
def get_storage() -> LocalFileStorage:
    config = get_config()
    return LocalFileStorage(root=config.storage.root, base_url=config.storage.base_url)


@lru_cache()
def get_notification_service() -> NotificationService:
    config = get_config()
    return NotificationService(
        channels=config.notifications.channels,
        enabled=config.notifications.enabled
    )
