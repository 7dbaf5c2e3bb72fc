"""
Pydantic schemas for request/response validation.
"""

from schemas.knowledge import (
    KnowledgeMetadata,
    KnowledgeItem,
    ReplyTemplate,
    KnowledgeMatch,
    TemplateMatch,
    KnowledgeStoreStats,
    CreatedItemResponse,
)
from schemas.replies import (
    SuggestRepliesRequest,
    ReplyContext,
    ReplyMetadata,
    SuggestedReply,
    SuggestRepliesResponse,
    RagStatsResponse,
)

__all__ = [
    # Knowledge store schemas
    "KnowledgeMetadata",
    "KnowledgeItem",
    "ReplyTemplate",
    "KnowledgeMatch",
    "TemplateMatch",
    "KnowledgeStoreStats",
    "CreatedItemResponse",

    # Reply suggestion schemas
    "SuggestRepliesRequest",
    "ReplyContext",
    "ReplyMetadata",
    "SuggestedReply",
    "SuggestRepliesResponse",
    "RagStatsResponse",
]
