"""
Knowledge base management endpoints.

Adds knowledge snippets and reply templates to the vector store at runtime.
When the store is disconnected the insert is skipped and `persisted` is false.
"""

from fastapi import APIRouter, Depends, HTTPException, status
import logfire

from api.dependencies import get_knowledge_store
from schemas.knowledge import CreatedItemResponse, KnowledgeItem, ReplyTemplate
from services.knowledge_store import KnowledgeStore


router = APIRouter(prefix="/api", tags=["Knowledge Base"])


@router.post("/knowledge", response_model=CreatedItemResponse, status_code=status.HTTP_201_CREATED)
async def add_knowledge(
    item: KnowledgeItem,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    """
    Add a knowledge snippet.

    Raises:
        HTTPException 500: If the insert fails
        HTTPException 422: If request validation fails
    """
    with logfire.span("api.add_knowledge", category=item.category):
        try:
            doc_id = await store.add_knowledge(item)
        except Exception as e:
            logfire.error("Failed to add knowledge item", error=str(e), error_type=type(e).__name__)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to add knowledge item: {str(e)}",
            )

        return CreatedItemResponse(id=doc_id, persisted=store.is_connected)


@router.post("/reply-templates", response_model=CreatedItemResponse, status_code=status.HTTP_201_CREATED)
async def add_reply_template(
    template: ReplyTemplate,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    """
    Add a reply template. `{{meeting_link}}`, `{{product_name}}` and
    `{{sender_name}}` are filled in when the template is used.

    Raises:
        HTTPException 500: If the insert fails
        HTTPException 422: If request validation fails
    """
    with logfire.span("api.add_reply_template", category=template.category):
        try:
            doc_id = await store.add_template(template)
        except Exception as e:
            logfire.error("Failed to add reply template", error=str(e), error_type=type(e).__name__)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to add reply template: {str(e)}",
            )

        return CreatedItemResponse(id=doc_id, persisted=store.is_connected)
