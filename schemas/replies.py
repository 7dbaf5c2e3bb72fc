"""
Pydantic schemas for the reply suggestion API.

These models validate the incoming email context and describe the
suggested replies returned by the RAG pipeline.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict

from schemas.knowledge import KnowledgeMatch, TemplateMatch


Tone = Literal["professional", "friendly", "formal"]


# ===================================================================
# REQUEST SCHEMAS
# ===================================================================

class SuggestRepliesRequest(BaseModel):
    """
    Request body for POST /api/suggest-replies

    `subject`, `body` and `from` are required, but are declared optional so
    the route can answer with its own 400 message instead of a 422.
    """

    subject: Optional[str] = None
    body: Optional[str] = None
    sender: Optional[str] = Field(default=None, alias="from")
    to: List[str] = Field(default_factory=list)
    date: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "subject": "Interview availability",
                "body": "Hi, we'd like to schedule your technical interview next week.",
                "from": "recruiter@company.com",
                "to": ["me@example.com"],
                "date": "2024-01-01T00:00:00Z"
            }
        }
    )

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or empty."""
        missing = []
        if not self.subject:
            missing.append("subject")
        if not self.body:
            missing.append("body")
        if not self.sender:
            missing.append("from")
        return missing


# ===================================================================
# SUGGESTED REPLY
# ===================================================================

class ReplyContext(BaseModel):
    """What a suggestion was built from."""

    relevant_knowledge: List[KnowledgeMatch] = Field(
        default_factory=list,
        serialization_alias="relevantKnowledge"
    )
    matched_template: Optional[TemplateMatch] = Field(
        default=None,
        serialization_alias="matchedTemplate"
    )
    reasoning: str


class ReplyMetadata(BaseModel):
    """Classification of a suggestion."""

    category: str
    tone: Tone
    action_required: bool
    estimated_response_time: str


class SuggestedReply(BaseModel):
    """A single candidate reply."""

    id: str
    content: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    context: ReplyContext
    metadata: ReplyMetadata


# ===================================================================
# RESPONSE SCHEMAS
# ===================================================================

class SuggestRepliesResponse(BaseModel):
    """Response from POST /api/suggest-replies"""

    success: bool = True
    email_id: str = Field(..., description="Subject of the email, echoed back")
    suggestions: List[SuggestedReply]
    generated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "email_id": "Interview availability",
                "suggestions": [
                    {
                        "id": "ai_3f9c1a2b7d4e",
                        "content": "Thank you for reaching out! You can book a slot here: https://cal.com/example",
                        "confidence": 0.8,
                        "context": {
                            "relevantKnowledge": [],
                            "matchedTemplate": None,
                            "reasoning": "AI-generated response using retrieved context and templates"
                        },
                        "metadata": {
                            "category": "job_interview",
                            "tone": "professional",
                            "action_required": True,
                            "estimated_response_time": "immediate"
                        }
                    }
                ],
                "generated_at": "2024-01-01T00:00:05Z"
            }
        }
    )


class RagStatsResponse(BaseModel):
    """Response from GET /api/rag-stats"""

    knowledge_items: int = Field(..., serialization_alias="knowledgeItems")
    reply_templates: int = Field(..., serialization_alias="replyTemplates")
    status: str
    rag_service: str = Field(default="active", serialization_alias="ragService")
    llm_model: str = Field(..., serialization_alias="llmModel")
    embedding_model: str = Field(..., serialization_alias="embeddingModel")
