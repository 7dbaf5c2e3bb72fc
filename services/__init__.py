"""
Services module for external integrations and business logic.
"""

from services.embeddings import EmbeddingProvider, RateLimiter
from services.knowledge_store import KnowledgeStore

__all__ = ["EmbeddingProvider", "RateLimiter", "KnowledgeStore"]
