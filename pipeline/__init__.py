"""
Pipeline factory function.

This module provides create_reply_pipeline() which instantiates
all pipeline steps in the correct order behind a ReplySuggestionService.
"""

from typing import Optional, Union

from pydantic_ai.models import Model

from pipeline.orchestrator import ReplySuggestionService, fallback_reply
from pipeline.steps.intent_classifier.main import IntentClassifierStep
from pipeline.steps.knowledge_retrieval.main import KnowledgeRetrievalStep
from pipeline.steps.reply_synthesizer.main import ReplySynthesizerStep
from services.knowledge_store import KnowledgeStore


def create_reply_pipeline(
    knowledge_store: KnowledgeStore,
    model: Optional[Union[str, Model]] = None,
    timeout: Optional[float] = None,
) -> ReplySuggestionService:
    """
    Factory function to create a fully configured reply suggestion service.

    Steps are registered in execution order:
    1. IntentClassifier: One-sentence intent of the email
    2. KnowledgeRetrieval: Knowledge snippets and templates near the email
    3. ReplySynthesizer: Template, AI-contextual and quick-response replies

    Args:
        knowledge_store: Store used for retrieval and statistics
        model: Chat model shared by the classifier and synthesizer
        timeout: Overall deadline in seconds (settings default if omitted)

    Example:
        ```python
        store = KnowledgeStore()
        await store.initialize()

        service = create_reply_pipeline(store)
        suggestions = await service.suggest_replies(
            EmailContext(subject="Demo", body="Can we book a demo?", sender="lead@acme.com")
        )
        ```
    """
    return ReplySuggestionService(
        knowledge_store=knowledge_store,
        classifier=IntentClassifierStep(model=model),
        retrieval=KnowledgeRetrievalStep(knowledge_store),
        synthesizer=ReplySynthesizerStep(model=model),
        timeout=timeout,
    )


__all__ = ["create_reply_pipeline", "ReplySuggestionService", "fallback_reply"]
