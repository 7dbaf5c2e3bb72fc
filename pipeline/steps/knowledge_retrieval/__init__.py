"""
Knowledge Retrieval Step

Concurrent similarity search over knowledge snippets and reply templates.
"""

from .main import KnowledgeRetrievalStep

__all__ = ["KnowledgeRetrievalStep"]
