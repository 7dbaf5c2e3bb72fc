"""
Pydantic schemas for the knowledge store.

Covers what goes into the store (knowledge items, reply templates), what
comes back out of a similarity search, and the store statistics.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


KnowledgeType = Literal["product", "outreach", "template", "faq"]


# ===================================================================
# STORED ITEMS
# ===================================================================

class KnowledgeMetadata(BaseModel):
    """Metadata attached to a knowledge snippet."""

    type: KnowledgeType = Field(..., description="Kind of snippet")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    priority: int = Field(default=1, description="Lower is more important")
    context: Optional[str] = Field(default=None, description="Optional usage hint")


class KnowledgeItem(BaseModel):
    """
    A short knowledge snippet (product facts, FAQ answers, outreach notes).

    `id` is assigned by the store on insert.
    """

    id: Optional[str] = None
    content: str = Field(..., min_length=1, description="Snippet text")
    category: str = Field(..., min_length=1, description="Category label")
    metadata: KnowledgeMetadata

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "OneBox-AI helps businesses organize, classify, and respond to emails.",
                "category": "product_overview",
                "metadata": {"type": "product", "tags": ["AI", "email"], "priority": 1}
            }
        }
    )


class ReplyTemplate(BaseModel):
    """
    A reply template with {{variable}} placeholders.

    `scenario` describes in plain language when the template applies; it is
    embedded together with the template text.
    """

    id: Optional[str] = None
    scenario: str = Field(..., min_length=1)
    template: str = Field(..., min_length=1)
    variables: List[str] = Field(default_factory=list)
    category: str = Field(..., min_length=1)

    @property
    def search_text(self) -> str:
        """Text indexed for similarity search."""
        return f"{self.scenario} {self.template}"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "scenario": "Meeting request response for project collaboration",
                "template": "I'd be happy to discuss! My available slots: {{meeting_link}}",
                "variables": ["meeting_link"],
                "category": "collaboration"
            }
        }
    )


# ===================================================================
# RETRIEVAL RESULTS
# ===================================================================

class KnowledgeMatch(BaseModel):
    """Knowledge snippet returned by a similarity search."""

    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    similarity: float = Field(..., ge=0.0, le=1.0)


class TemplateMatch(BaseModel):
    """Reply template returned by a similarity search."""

    scenario: str
    template: str
    variables: List[str] = Field(default_factory=list)
    category: str
    similarity: float = Field(..., ge=0.0, le=1.0)


# ===================================================================
# STATS / API RESPONSES
# ===================================================================

class KnowledgeStoreStats(BaseModel):
    """Collection counts and connectivity of the knowledge store."""

    knowledge_items: int = Field(..., serialization_alias="knowledgeItems")
    reply_templates: int = Field(..., serialization_alias="replyTemplates")
    status: Literal["active", "disconnected"]


class CreatedItemResponse(BaseModel):
    """Response for POST /api/knowledge and POST /api/reply-templates."""

    id: str
    persisted: bool = Field(
        ...,
        description="False when the vector store is disconnected and the insert was skipped"
    )
