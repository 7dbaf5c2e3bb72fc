"""
Reply suggestion service.

Wires the knowledge store and the three pipeline steps together and is the
single entry point used by the API. `suggest_replies` is total: every
failure, including a timeout, ends in the fixed fallback reply.
"""

import asyncio
import logfire
from typing import List, Optional
from uuid import uuid4

from config.settings import settings
from pipeline.core.runner import PipelineRunner
from pipeline.models.core import EmailContext, PipelineState, ReplyPipelineData
from pipeline.steps.intent_classifier.main import IntentClassifierStep
from pipeline.steps.knowledge_retrieval.main import KnowledgeRetrievalStep
from pipeline.steps.reply_synthesizer.main import ReplySynthesizerStep
from schemas.replies import (
    RagStatsResponse,
    ReplyContext,
    ReplyMetadata,
    SuggestedReply,
)
from services.knowledge_store import KnowledgeStore


FALLBACK_REPLY_ID = "fallback"
FALLBACK_REPLY_CONTENT = "Thank you for your email. I will review your message and get back to you soon."


def fallback_reply() -> SuggestedReply:
    """The single reply returned when the pipeline cannot produce any."""
    return SuggestedReply(
        id=FALLBACK_REPLY_ID,
        content=FALLBACK_REPLY_CONTENT,
        confidence=0.5,
        context=ReplyContext(reasoning="Fallback response due to processing error"),
        metadata=ReplyMetadata(
            category="general",
            tone="professional",
            action_required=True,
            estimated_response_time="24 hours",
        ),
    )


class ReplySuggestionService:
    """
    Runs classify -> retrieve -> synthesize for one email at a time.

    Stateless per request; the shared knowledge store and chat agents are
    safe to use from concurrent requests.
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        classifier: Optional[IntentClassifierStep] = None,
        retrieval: Optional[KnowledgeRetrievalStep] = None,
        synthesizer: Optional[ReplySynthesizerStep] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            knowledge_store: Initialized (or disconnected) knowledge store
            classifier: Intent classifier step (default model from settings)
            retrieval: Retrieval step (built on `knowledge_store` if omitted)
            synthesizer: Reply synthesizer step (default model from settings)
            timeout: Overall pipeline deadline in seconds
        """
        self.knowledge_store = knowledge_store
        self.timeout = timeout if timeout is not None else settings.pipeline_timeout_seconds

        self.runner = PipelineRunner([
            classifier or IntentClassifierStep(),
            retrieval or KnowledgeRetrievalStep(knowledge_store),
            synthesizer or ReplySynthesizerStep(),
        ])

    async def suggest_replies(self, email: EmailContext) -> List[SuggestedReply]:
        """
        Suggest replies for an email. Never raises.

        Returns:
            Pipeline suggestions in strategy order, or exactly
            [fallback_reply()] if any stage failed or the deadline passed
        """
        pipeline_data = ReplyPipelineData(task_id=str(uuid4()), email=email)

        with logfire.span(
            "reply_service.suggest_replies",
            task_id=pipeline_data.task_id,
            sender=email.sender
        ):
            try:
                return await asyncio.wait_for(self.runner.run(pipeline_data), timeout=self.timeout)

            except Exception as e:
                failed_in_state = pipeline_data.state
                pipeline_data.state = PipelineState.ERROR

                if isinstance(e, asyncio.TimeoutError):
                    reason = f"Pipeline timed out after {self.timeout}s"
                else:
                    reason = str(e)

                logfire.error(
                    "Reply generation failed, returning fallback reply",
                    task_id=pipeline_data.task_id,
                    error=reason[:500],
                    error_type=type(e).__name__,
                    failed_in_state=failed_in_state.value,
                    errors=pipeline_data.errors
                )

                pipeline_data.state = PipelineState.FALLBACK
                return [fallback_reply()]

    async def get_stats(self) -> RagStatsResponse:
        """Knowledge store counts plus the configured model names."""
        stats = await self.knowledge_store.stats()

        return RagStatsResponse(
            knowledge_items=stats.knowledge_items,
            reply_templates=stats.reply_templates,
            status=stats.status,
            rag_service="active",
            llm_model=settings.llm_model,
            embedding_model=self.knowledge_store.embedding_provider.model,
        )
