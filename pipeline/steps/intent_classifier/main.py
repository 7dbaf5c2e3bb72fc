"""
Intent Classifier Step - Step 1

Asks the chat model for a one-sentence description of what the sender wants.
Classification failure is never fatal: the step falls back to
"General inquiry" and the pipeline carries on.
"""

import logfire
from typing import Optional, Union

from pydantic_ai.models import Model

from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import (
    DEFAULT_INTENT,
    EmailContext,
    PipelineState,
    ReplyPipelineData,
    StepResult,
)
from utils.llm_agent import create_agent

from .prompts import SYSTEM_PROMPT, create_intent_prompt


class IntentClassifierStep(BasePipelineStep):
    """
    Step 1: Classify the email's intent.

    Updates ReplyPipelineData fields:
    - intent: str
    """

    def __init__(self, model: Optional[Union[str, Model]] = None):
        """
        Initialize intent classifier step.

        Args:
            model: Chat model ("provider:model" or Model instance); defaults to settings
        """
        super().__init__(step_name="intent_classifier", state=PipelineState.CLASSIFYING)

        self.temperature = 0.1  # Low temperature for a stable one-line label
        self.max_tokens = 100

        self.agent = create_agent(
            model=model,
            system_prompt=SYSTEM_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            retries=1
        )

    async def classify_intent(self, email: EmailContext) -> str:
        """
        Describe the email's intent in one sentence.

        Never raises: any error (network, quota, empty answer) yields
        DEFAULT_INTENT.
        """
        try:
            result = await self.agent.run(create_intent_prompt(email))
            intent = (result.output or "").strip()

        except Exception as e:
            logfire.error(
                "Intent classification failed, using default intent",
                error=str(e)[:500],
                error_type=type(e).__name__
            )
            return DEFAULT_INTENT

        return intent or DEFAULT_INTENT

    async def _execute_step(self, pipeline_data: ReplyPipelineData) -> StepResult:
        intent = await self.classify_intent(pipeline_data.email)
        pipeline_data.intent = intent

        logfire.info("Detected intent", intent=intent)

        warnings = []
        if intent == DEFAULT_INTENT:
            warnings.append("Intent fell back to default")

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={"intent": intent},
            warnings=warnings
        )
