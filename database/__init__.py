"""
Database module initialization.
Exports database components for use throughout the application.
"""

from database.base import Base, engine, SessionLocal
from database.session import get_db_context
from database.utils import (
    check_db_connection,
    ensure_vector_schema,
    get_db_info,
)

__all__ = [
    # Base components
    "Base",
    "engine",
    "SessionLocal",
    # Session management
    "get_db_context",
    # Utilities
    "check_db_connection",
    "ensure_vector_schema",
    "get_db_info",
]
