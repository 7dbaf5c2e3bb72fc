"""Dependencies that hand the shared reply service and knowledge store to routes."""

from fastapi import HTTPException, Request, status

from pipeline.orchestrator import ReplySuggestionService
from services.knowledge_store import KnowledgeStore


def get_reply_service(request: Request) -> ReplySuggestionService:
    """
    Reply service created during application startup.

    Raises:
        HTTPException: 503 if startup has not finished
    """
    service = getattr(request.app.state, "reply_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reply service is not initialized",
        )
    return service


def get_knowledge_store(request: Request) -> KnowledgeStore:
    """Knowledge store created during application startup."""
    store = getattr(request.app.state, "knowledge_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Knowledge store is not initialized",
        )
    return store
