"""
Reply suggestion API endpoints.

POST /api/suggest-replies runs the RAG pipeline for one email.
GET  /api/rag-stats reports knowledge store counts and configured models.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logfire

from api.dependencies import get_reply_service
from pipeline.models.core import EmailContext
from pipeline.orchestrator import ReplySuggestionService
from schemas.replies import (
    RagStatsResponse,
    SuggestRepliesRequest,
    SuggestRepliesResponse,
)


router = APIRouter(prefix="/api", tags=["Reply Suggestions"])

MISSING_FIELDS_ERROR = "Missing required email fields: subject, body, from"
SUGGEST_REPLIES_PATH = "/api/suggest-replies"


async def suggest_replies_validation_handler(request: Request, exc: RequestValidationError):
    """
    Body validation errors on the suggest route answer with the fixed 400 body.

    Every other route keeps FastAPI's default 422 response.
    """
    if request.url.path != SUGGEST_REPLIES_PATH:
        return await request_validation_exception_handler(request, exc)

    logfire.warning(
        "Suggest replies request rejected",
        validation_errors=[".".join(str(part) for part in err["loc"]) for err in exc.errors()]
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MISSING_FIELDS_ERROR},
    )


@router.post(
    "/suggest-replies",
    response_model=SuggestRepliesResponse,
    responses={
        400: {"description": "subject, body or from missing"},
        500: {"description": "Unexpected failure while building the response"},
    },
)
async def suggest_replies(
    request: SuggestRepliesRequest,
    service: ReplySuggestionService = Depends(get_reply_service),
):
    """
    Suggest replies for an incoming email.

    The pipeline classifies the email's intent, retrieves related knowledge
    and reply templates, and synthesizes up to three suggestions (template,
    AI-contextual, quick response). If the pipeline fails, a single fallback
    reply is returned with status 200.

    Returns:
        SuggestRepliesResponse with `email_id` set to the subject

    Errors:
        400: `{"error": "Missing required email fields: subject, body, from"}`
        500: `{"error": "Failed to generate reply suggestions", "details": ...}`
    """
    missing = request.missing_fields()
    if missing:
        logfire.warning("Suggest replies request rejected", missing_fields=missing)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": MISSING_FIELDS_ERROR},
        )

    with logfire.span(
        "api.suggest_replies",
        subject=request.subject[:100],
        sender=request.sender
    ):
        try:
            email = EmailContext(
                subject=request.subject,
                body=request.body,
                sender=request.sender,
                to=tuple(request.to),
                date=request.date,
            )

            suggestions = await service.suggest_replies(email)

            logfire.info(
                "Generated reply suggestions",
                suggestion_count=len(suggestions),
                suggestion_ids=[s.id for s in suggestions]
            )

            return SuggestRepliesResponse(
                success=True,
                email_id=request.subject,
                suggestions=suggestions,
                generated_at=datetime.now(timezone.utc),
            )

        except Exception as e:
            logfire.error(
                "Error generating reply suggestions",
                error=str(e),
                error_type=type(e).__name__
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to generate reply suggestions", "details": str(e)},
            )


@router.get("/rag-stats", response_model=RagStatsResponse)
async def get_rag_stats(
    service: ReplySuggestionService = Depends(get_reply_service),
):
    """
    Knowledge store statistics.

    Returns `knowledgeItems`, `replyTemplates`, `status` (`active` or
    `disconnected`), `ragService`, `llmModel` and `embeddingModel`.
    """
    with logfire.span("api.rag_stats"):
        try:
            return await service.get_stats()

        except Exception as e:
            logfire.error(
                "Error getting RAG stats",
                error=str(e),
                error_type=type(e).__name__
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to get RAG statistics", "details": str(e)},
            )
