"""
Vector-indexed knowledge store for reply suggestions.

Holds two collections, knowledge snippets and reply templates, in Postgres
with pgvector, ranked by cosine distance. Every embedding goes through the
shared EmbeddingProvider.

If the database is unreachable at startup the store runs disconnected for
the rest of the process: inserts are skipped and searches serve a small
static list.
"""

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple, Optional, Protocol
from uuid import UUID, uuid4

import logfire
from sqlalchemy import func

from database.retry_utils import retry_on_db_error
from database.session import get_db_context
from database.utils import ensure_vector_schema
from models.vector_document import VectorDocument
from schemas.knowledge import (
    KnowledgeItem,
    KnowledgeMatch,
    KnowledgeStoreStats,
    ReplyTemplate,
    TemplateMatch,
)
from services.embeddings import EmbeddingProvider
from services.seed_data import (
    FALLBACK_KNOWLEDGE,
    FALLBACK_TEMPLATES,
    SEED_KNOWLEDGE,
    SEED_TEMPLATES,
)


KNOWLEDGE_COLLECTION = "knowledge_base"
TEMPLATES_COLLECTION = "reply_templates"

EmbedFunction = Callable[[str], Awaitable[List[float]]]


class CollectionHit(NamedTuple):
    """One row from a similarity query."""

    document: str
    metadata: Dict[str, Any]
    distance: Optional[float]


class VectorCollection(Protocol):
    """Named collection that embeds documents and queries with its embedding function."""

    name: str

    async def add(self, doc_id: str, document: str, metadata: Dict[str, Any]) -> None: ...

    async def query(self, text: str, limit: int) -> List[CollectionHit]: ...

    async def count(self) -> int: ...


def similarity_from_distance(distance: Optional[float]) -> float:
    """1 - cosine distance, clamped to [0, 1]. Undefined distances score 0."""
    if distance is None or math.isnan(distance):
        return 0.0
    return max(0.0, min(1.0, 1.0 - distance))


class PgvectorCollection:
    """
    Collection stored as rows of vector_documents.

    Database calls are synchronous SQLAlchemy and run in a worker thread so
    they don't block the event loop.
    """

    def __init__(self, name: str, embed: EmbedFunction):
        self.name = name
        self._embed = embed

    async def add(self, doc_id: str, document: str, metadata: Dict[str, Any]) -> None:
        embedding = await self._embed(document)
        await asyncio.to_thread(self._insert, doc_id, document, metadata, embedding)

    async def query(self, text: str, limit: int) -> List[CollectionHit]:
        embedding = await self._embed(text)
        return await asyncio.to_thread(self._nearest, embedding, limit)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)

    @retry_on_db_error
    def _insert(
        self,
        doc_id: str,
        document: str,
        metadata: Dict[str, Any],
        embedding: List[float],
    ) -> None:
        with get_db_context() as db:
            db.add(
                VectorDocument(
                    id=UUID(doc_id),
                    collection=self.name,
                    document=document,
                    doc_metadata=metadata,
                    embedding=embedding,
                )
            )
            db.commit()

    @retry_on_db_error
    def _nearest(self, embedding: List[float], limit: int) -> List[CollectionHit]:
        distance = VectorDocument.embedding.cosine_distance(embedding).label("distance")

        with get_db_context() as db:
            rows = (
                db.query(VectorDocument.document, VectorDocument.doc_metadata, distance)
                .filter(VectorDocument.collection == self.name)
                .order_by(distance)
                .limit(limit)
                .all()
            )

        return [
            CollectionHit(
                document=row.document,
                metadata=dict(row.doc_metadata or {}),
                distance=float(row.distance) if row.distance is not None else None,
            )
            for row in rows
        ]

    @retry_on_db_error
    def _count(self) -> int:
        with get_db_context() as db:
            return (
                db.query(func.count(VectorDocument.id))
                .filter(VectorDocument.collection == self.name)
                .scalar()
            ) or 0


class KnowledgeStore:
    """
    Knowledge snippets and reply templates searchable by semantic similarity.

    Usage:
        store = KnowledgeStore(embedding_provider)
        await store.initialize()          # connect, create schema, seed if empty
        matches = await store.search_knowledge("demo request", limit=3)
    """

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        knowledge_collection: Optional[VectorCollection] = None,
        templates_collection: Optional[VectorCollection] = None,
        schema_initializer: Optional[Callable[[], None]] = ensure_vector_schema,
    ):
        """
        Args:
            embedding_provider: Shared provider (a new one is created if omitted)
            knowledge_collection: Backend for knowledge snippets (pgvector by default)
            templates_collection: Backend for reply templates (pgvector by default)
            schema_initializer: Sync callable that connects and creates the schema;
                None skips the connection check
        """
        self.embedding_provider = embedding_provider or EmbeddingProvider()
        embed = self.embedding_provider.embed

        self.knowledge_collection = knowledge_collection or PgvectorCollection(KNOWLEDGE_COLLECTION, embed)
        self.templates_collection = templates_collection or PgvectorCollection(TEMPLATES_COLLECTION, embed)
        self._schema_initializer = schema_initializer

        self.is_connected = False

    async def initialize(self) -> None:
        """
        Connect to the vector store and seed it when empty.

        Never raises: an unreachable store switches to disconnected mode.
        """
        with logfire.span("knowledge_store.initialize"):
            try:
                if self._schema_initializer is not None:
                    await asyncio.to_thread(self._schema_initializer)
            except Exception as e:
                logfire.warning(
                    "Vector store not available, running in fallback mode without vector search",
                    error=str(e)[:300],
                    error_type=type(e).__name__
                )
                self.is_connected = False
                return

            self.is_connected = True
            logfire.info("Vector collections initialized")

            try:
                await self.seed()
            except Exception as e:
                logfire.error(
                    "Knowledge base seeding failed",
                    error=str(e)[:300],
                    error_type=type(e).__name__
                )

    async def seed(self) -> bool:
        """
        Populate the seed catalog if the knowledge collection is empty.

        Returns:
            True if seed data was inserted
        """
        if not self.is_connected:
            logfire.warning("Vector store unavailable, skipping knowledge base seeding")
            return False

        stats = await self.stats()
        if stats.knowledge_items > 0:
            logfire.info("Knowledge base already seeded", knowledge_items=stats.knowledge_items)
            return False

        logfire.info(
            "Seeding knowledge base",
            knowledge_items=len(SEED_KNOWLEDGE),
            reply_templates=len(SEED_TEMPLATES)
        )

        for item in SEED_KNOWLEDGE:
            await self.add_knowledge(item)

        for template in SEED_TEMPLATES:
            await self.add_template(template)

        logfire.info("Knowledge base seeded successfully")
        return True

    async def add_knowledge(self, item: KnowledgeItem) -> str:
        """
        Add a knowledge snippet.

        Returns:
            New item id (also returned, but not stored, when disconnected)
        """
        doc_id = str(uuid4())

        if not self.is_connected:
            logfire.warning("Vector store unavailable, skipping knowledge item", category=item.category)
            return doc_id

        metadata = {"category": item.category, **item.metadata.model_dump(exclude_none=True)}
        await self.knowledge_collection.add(doc_id, item.content, metadata)

        logfire.info("Added knowledge item", id=doc_id, category=item.category)
        return doc_id

    async def add_template(self, template: ReplyTemplate) -> str:
        """
        Add a reply template, indexed on its scenario and text.

        Returns:
            New template id (also returned, but not stored, when disconnected)
        """
        doc_id = str(uuid4())

        if not self.is_connected:
            logfire.warning("Vector store unavailable, skipping reply template", category=template.category)
            return doc_id

        metadata = {
            "scenario": template.scenario,
            "template": template.template,
            "variables": list(template.variables),
            "category": template.category,
        }
        await self.templates_collection.add(doc_id, template.search_text, metadata)

        logfire.info("Added reply template", id=doc_id, category=template.category)
        return doc_id

    async def search_knowledge(self, query: str, limit: int = 3) -> List[KnowledgeMatch]:
        """
        Most similar knowledge snippets first. Never raises.
        """
        if not self.is_connected:
            logfire.info("Vector store unavailable, returning fallback knowledge", limit=limit)
            return fallback_knowledge(limit)

        try:
            hits = await self.knowledge_collection.query(query, limit)
        except Exception as e:
            logfire.error(
                "Knowledge search failed, returning fallback knowledge",
                error=str(e)[:300],
                error_type=type(e).__name__
            )
            return fallback_knowledge(limit)

        return [
            KnowledgeMatch(
                content=hit.document,
                metadata=hit.metadata,
                similarity=similarity_from_distance(hit.distance),
            )
            for hit in hits
        ]

    async def search_templates(self, query: str, limit: int = 2) -> List[TemplateMatch]:
        """
        Most similar reply templates first. Never raises.
        """
        if not self.is_connected:
            logfire.info("Vector store unavailable, returning fallback reply templates", limit=limit)
            return fallback_templates(limit)

        try:
            hits = await self.templates_collection.query(query, limit)
        except Exception as e:
            logfire.error(
                "Template search failed, returning fallback reply templates",
                error=str(e)[:300],
                error_type=type(e).__name__
            )
            return fallback_templates(limit)

        return [
            TemplateMatch(
                scenario=hit.metadata.get("scenario", ""),
                template=hit.metadata.get("template", hit.document),
                variables=list(hit.metadata.get("variables") or []),
                category=hit.metadata.get("category", "general"),
                similarity=similarity_from_distance(hit.distance),
            )
            for hit in hits
        ]

    async def stats(self) -> KnowledgeStoreStats:
        """Collection counts; zeros with status 'disconnected' when offline."""
        if not self.is_connected:
            return KnowledgeStoreStats(knowledge_items=0, reply_templates=0, status="disconnected")

        knowledge_count, templates_count = await asyncio.gather(
            self.knowledge_collection.count(),
            self.templates_collection.count(),
        )

        return KnowledgeStoreStats(
            knowledge_items=knowledge_count,
            reply_templates=templates_count,
            status="active",
        )


def fallback_knowledge(limit: int) -> List[KnowledgeMatch]:
    """Static knowledge list in insertion order, truncated to `limit`."""
    return [match.model_copy(deep=True) for match in FALLBACK_KNOWLEDGE[:max(limit, 0)]]


def fallback_templates(limit: int) -> List[TemplateMatch]:
    """Static template list in insertion order, truncated to `limit`."""
    return [match.model_copy(deep=True) for match in FALLBACK_TEMPLATES[:max(limit, 0)]]
