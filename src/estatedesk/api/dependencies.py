"""
FastAPI Dependencies

Provides dependency injection for database sessions and settings.
"""
from typing import Generator
from sqlalchemy.orm import Session

from config.settings import settings
from src.estatedesk.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Uncommitted work is rolled back when the request ends, so a handler that
    fails part-way leaves nothing behind.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def get_settings():
    """
    Settings dependency.

    Returns:
        Application settings
    """
    return settings
