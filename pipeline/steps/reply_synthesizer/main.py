"""
Reply Synthesizer Step - Step 3

Turns the email, its intent and the retrieved context into an ordered list
of candidate replies. Three strategies run in a fixed order:

1. Template: only when the best template clears the similarity gate
2. AI-contextual: always attempted; a failure here fails the step
3. Quick response: at most one canned reply for "thank" / "confirm" emails
"""

import logfire
from typing import List, Optional, Union

from pydantic_ai.models import Model

from config.settings import settings
from pipeline.core.exceptions import ExternalAPIError
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import (
    EmailContext,
    PipelineState,
    ReplyPipelineData,
    StepResult,
    StrategyResult,
)
from schemas.knowledge import KnowledgeMatch, TemplateMatch
from schemas.replies import ReplyContext, ReplyMetadata, SuggestedReply
from utils.llm_agent import create_agent

from .prompts import SYSTEM_PROMPT, create_reply_prompt
from .rules import categorize_email, match_quick_response
from .utils import contains_link, new_suggestion_id, render_template, requires_action


TEMPLATE_SIMILARITY_THRESHOLD = 0.7  # strictly greater than
AI_CONFIDENCE = 0.8
DEFAULT_AI_CONTENT = "Thank you for your email. I'll review your message and respond accordingly."

STRATEGY_BY_ID_PREFIX = {
    "template": "template",
    "ai": "ai_contextual",
    "quick": "quick_response",
}


class ReplySynthesizerStep(BasePipelineStep):
    """
    Step 3: Produce suggested replies.

    Updates ReplyPipelineData fields:
    - suggestions: List[SuggestedReply]
    - metadata["strategies"]: names of strategies that produced a reply
    """

    def __init__(
        self,
        model: Optional[Union[str, Model]] = None,
        meeting_link: Optional[str] = None,
        product_name: Optional[str] = None,
    ):
        """
        Initialize reply synthesizer step.

        Args:
            model: Chat model ("provider:model" or Model instance); defaults to settings
            meeting_link: Value for {{meeting_link}}; defaults to settings
            product_name: Value for {{product_name}}; defaults to settings
        """
        super().__init__(step_name="reply_synthesizer", state=PipelineState.SYNTHESIZING)

        self.meeting_link = meeting_link or settings.meeting_link
        self.product_name = product_name or settings.product_name

        self.temperature = 0.7
        self.max_tokens = 300

        self.agent = create_agent(
            model=model,
            system_prompt=SYSTEM_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            retries=1
        )

    async def _validate_input(self, pipeline_data: ReplyPipelineData) -> Optional[str]:
        if not pipeline_data.search_query:
            return "search_query is empty (retrieval step did not run)"
        return None

    # ===================================================================
    # STRATEGIES
    # ===================================================================

    def template_strategy(
        self,
        email: EmailContext,
        knowledge_results: List[KnowledgeMatch],
        template_results: List[TemplateMatch],
    ) -> StrategyResult:
        """Fill the best template when it is similar enough to the email."""
        if not template_results:
            return StrategyResult.skipped("template")

        best = template_results[0]
        if best.similarity <= TEMPLATE_SIMILARITY_THRESHOLD:
            return StrategyResult.skipped("template")

        content = render_template(best.template, {
            "meeting_link": self.meeting_link,
            "product_name": self.product_name,
            "sender_name": email.sender_name,
        }).strip()

        if not content:
            return StrategyResult.skipped("template")

        suggestion = SuggestedReply(
            id=new_suggestion_id("template"),
            content=content,
            confidence=best.similarity,
            context=ReplyContext(
                relevant_knowledge=knowledge_results[:2],
                matched_template=best,
                reasoning=(
                    f"Matched template for {best.category} scenario "
                    f"with {round(best.similarity * 100)}% confidence"
                ),
            ),
            metadata=ReplyMetadata(
                category=best.category,
                tone="professional",
                action_required=contains_link(content),
                estimated_response_time="immediate",
            ),
        )
        return StrategyResult.produced("template", suggestion)

    async def ai_contextual_strategy(
        self,
        email: EmailContext,
        intent: str,
        knowledge_results: List[KnowledgeMatch],
        template_results: List[TemplateMatch],
    ) -> StrategyResult:
        """Ask the chat model for a reply grounded in the retrieved context."""
        prompt = create_reply_prompt(
            email=email,
            intent=intent,
            knowledge_results=knowledge_results,
            template_results=template_results,
            meeting_link=self.meeting_link,
        )

        try:
            result = await self.agent.run(prompt)
            content = (result.output or "").strip() or DEFAULT_AI_CONTENT

        except Exception as e:
            logfire.error(
                "AI reply generation failed",
                error=str(e)[:500],
                error_type=type(e).__name__
            )
            return StrategyResult.failed("ai_contextual", f"{type(e).__name__}: {e}")

        suggestion = SuggestedReply(
            id=new_suggestion_id("ai"),
            content=content,
            confidence=AI_CONFIDENCE,
            context=ReplyContext(
                relevant_knowledge=knowledge_results,
                matched_template=template_results[0] if template_results else None,
                reasoning="AI-generated response using retrieved context and templates",
            ),
            metadata=ReplyMetadata(
                category=categorize_email(email),
                tone="professional",
                action_required=requires_action(content),
                estimated_response_time="immediate",
            ),
        )
        return StrategyResult.produced("ai_contextual", suggestion)

    def quick_response_strategy(self, email: EmailContext) -> StrategyResult:
        """Canned reply for thank-you and confirmation emails."""
        rule = match_quick_response(email)
        if rule is None:
            return StrategyResult.skipped("quick_response")

        suggestion = SuggestedReply(
            id=new_suggestion_id("quick"),
            content=rule.content,
            confidence=rule.confidence,
            context=ReplyContext(reasoning=rule.reasoning),
            metadata=ReplyMetadata(
                category=rule.category,
                tone=rule.tone,
                action_required=False,
                estimated_response_time="immediate",
            ),
        )
        return StrategyResult.produced("quick_response", suggestion)

    # ===================================================================
    # SYNTHESIS
    # ===================================================================

    async def run_strategies(
        self,
        email: EmailContext,
        intent: str,
        knowledge_results: List[KnowledgeMatch],
        template_results: List[TemplateMatch],
    ) -> List[StrategyResult]:
        """Run every strategy in order and return each outcome."""
        return [
            self.template_strategy(email, knowledge_results, template_results),
            await self.ai_contextual_strategy(email, intent, knowledge_results, template_results),
            self.quick_response_strategy(email),
        ]

    async def synthesize(
        self,
        email: EmailContext,
        intent: str,
        knowledge_results: List[KnowledgeMatch],
        template_results: List[TemplateMatch],
    ) -> List[SuggestedReply]:
        """
        Ordered suggestions: template (if any), AI-contextual, quick response (if any).

        Raises:
            ExternalAPIError: If the AI-contextual strategy failed
        """
        outcomes = await self.run_strategies(email, intent, knowledge_results, template_results)

        failed = [o for o in outcomes if not o.success]
        if failed:
            raise ExternalAPIError(f"{failed[0].strategy} strategy failed: {failed[0].error}")

        return [o.suggestion for o in outcomes if o.suggestion is not None]

    async def _execute_step(self, pipeline_data: ReplyPipelineData) -> StepResult:
        try:
            suggestions = await self.synthesize(
                pipeline_data.email,
                pipeline_data.intent,
                pipeline_data.knowledge_results,
                pipeline_data.template_results,
            )
        except ExternalAPIError as e:
            return StepResult(success=False, step_name=self.step_name, error=str(e))

        pipeline_data.suggestions = suggestions
        pipeline_data.metadata["strategies"] = [
            STRATEGY_BY_ID_PREFIX[s.id.split("_", 1)[0]] for s in suggestions
        ]

        logfire.info(
            "Suggestions synthesized",
            suggestion_count=len(suggestions),
            strategies=pipeline_data.metadata["strategies"]
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "suggestion_count": len(suggestions),
                "strategies": pipeline_data.metadata["strategies"],
            }
        )
