"""
Models module initialization.
Imports all SQLAlchemy models so Base.metadata.create_all sees them.
"""

from models.vector_document import VectorDocument

__all__ = [
    "VectorDocument",
]
