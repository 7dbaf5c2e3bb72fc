"""
Vector document model for SQLAlchemy ORM.
Represents the vector_documents table backing the knowledge store collections.
"""

from uuid import uuid4

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.sql import func

from config import settings
from database.base import Base


class VectorDocument(Base):
    """
    A single embedded document in a named collection.

    Attributes:
        id (UUID): Primary key, assigned by the knowledge store on insert
        collection (str): Collection name ("knowledge_base" or "reply_templates")
        document (str): Text that was embedded
        doc_metadata (dict): Item metadata (stored in the "metadata" column)
        embedding (Vector): Embedding of `document`
        created_at (datetime): Insert time
    """

    __tablename__ = "vector_documents"

    # Primary Key
    id = Column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Document ID"
    )

    collection = Column(
        String(100),
        nullable=False,
        comment="Logical collection name"
    )

    document = Column(
        Text,
        nullable=False,
        comment="Embedded text"
    )

    doc_metadata = Column(
        "metadata",
        JSONB,
        nullable=False,
        default=dict,
        comment="Knowledge item or reply template fields"
    )

    embedding = Column(
        Vector(settings.embedding_dimensions),
        nullable=False,
        comment="Text embedding (cosine space)"
    )

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="When the document was added"
    )

    __table_args__ = (
        Index('ix_vector_documents_collection', 'collection'),
    )

    def __repr__(self) -> str:
        """String representation of VectorDocument model."""
        return (
            f"<VectorDocument(id={self.id}, collection={self.collection}, "
            f"created_at={self.created_at})>"
        )
