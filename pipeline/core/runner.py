"""
Step base class and sequential runner for the reply pipeline.

classify -> retrieve -> synthesize all share one ReplyPipelineData. Each step
moves the pipeline into its own PipelineState before doing any work, so a
failure can be attributed to the state it happened in.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
import time
import logfire

from pipeline.models.core import PipelineState, ReplyPipelineData, StepResult
from pipeline.core.exceptions import StepExecutionError, ValidationError
from schemas.replies import SuggestedReply


class BasePipelineStep(ABC):
    """
    One stage of the reply pipeline.

    Subclasses implement `_execute_step()` and may override `_validate_input()`
    to check what earlier steps should have written. Every error raised inside
    a step surfaces as StepExecutionError carrying the step name.
    """

    def __init__(self, step_name: str, state: PipelineState):
        self.step_name = step_name
        self.state = state

    async def execute(self, pipeline_data: ReplyPipelineData) -> StepResult:
        """
        Enter this step's state, validate prerequisites and run the step.

        The elapsed time is recorded under `step_timings[step_name]` and in
        `result.metadata["duration"]`, whether the step succeeded or not.

        Raises:
            StepExecutionError: Validation failed or the step raised
        """
        start_time = time.perf_counter()
        pipeline_data.state = self.state

        with logfire.span(
            f"pipeline.{self.step_name}",
            task_id=pipeline_data.task_id,
            step=self.step_name
        ):
            try:
                logfire.info(
                    f"{self.step_name} started",
                    task_id=pipeline_data.task_id,
                    state=self.state.value
                )

                validation_error = await self._validate_input(pipeline_data)
                if validation_error:
                    raise ValidationError(f"Input validation failed: {validation_error}")

                result = await self._execute_step(pipeline_data)

                duration = time.perf_counter() - start_time
                pipeline_data.add_timing(self.step_name, duration)
                result.metadata = {**(result.metadata or {}), "duration": duration}

                logfire.info(
                    f"{self.step_name} completed",
                    task_id=pipeline_data.task_id,
                    duration=duration,
                    success=result.success
                )
                return result

            except Exception as e:
                duration = time.perf_counter() - start_time
                pipeline_data.add_timing(self.step_name, duration)
                pipeline_data.add_error(self.step_name, str(e))

                logfire.error(
                    f"{self.step_name} failed",
                    task_id=pipeline_data.task_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    duration=duration,
                    exc_info=True
                )
                raise StepExecutionError(self.step_name, e) from e

    async def _validate_input(self, pipeline_data: ReplyPipelineData) -> Optional[str]:
        """Return an error message when a prerequisite is missing, else None."""
        return None

    @abstractmethod
    async def _execute_step(self, pipeline_data: ReplyPipelineData) -> StepResult:
        ...


class PipelineRunner:
    """Runs the reply steps in order and hands back the synthesized suggestions."""

    def __init__(self, steps: Optional[List[BasePipelineStep]] = None):
        self.steps = steps or []

    async def run(self, pipeline_data: ReplyPipelineData) -> List[SuggestedReply]:
        """
        Run every step, then mark the pipeline DONE.

        A StepResult with success=False stops the run. So does a final state
        with no suggestions, since the synthesizer always emits the
        AI-contextual reply when it succeeds.

        Raises:
            StepExecutionError: A step failed or reported failure
            ValueError: No suggestions were produced
        """
        with logfire.span(
            "pipeline.full_run",
            task_id=pipeline_data.task_id,
            subject=pipeline_data.email.subject[:100]
        ):
            for step in self.steps:
                result = await step.execute(pipeline_data)
                if not result.success:
                    raise StepExecutionError(
                        step.step_name,
                        Exception(result.error or "Unknown error")
                    )

            if not pipeline_data.suggestions:
                raise ValueError(f"No suggestions produced for task {pipeline_data.task_id}")

            pipeline_data.state = PipelineState.DONE

            logfire.info(
                "Reply pipeline completed",
                task_id=pipeline_data.task_id,
                suggestion_count=len(pipeline_data.suggestions),
                total_duration=pipeline_data.total_duration(),
                step_timings=pipeline_data.step_timings
            )
            return pipeline_data.suggestions
