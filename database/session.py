"""
Database session management utilities.
Provides context managers for vector store sessions.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session

from database.base import SessionLocal


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Database session context manager.

    Rolls back on error and always returns the connection to the pool.

    Usage:
        with get_db_context() as db:
            db.add(document)
            db.commit()
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
