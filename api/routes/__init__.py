"""
API route handlers.
"""

from api.routes.replies import router as replies_router
from api.routes.replies import suggest_replies_validation_handler
from api.routes.knowledge import router as knowledge_router

__all__ = ["replies_router", "knowledge_router", "suggest_replies_validation_handler"]
