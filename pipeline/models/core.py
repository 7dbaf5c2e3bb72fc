"""Core data models for the reply suggestion pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from schemas.knowledge import KnowledgeMatch, TemplateMatch
from schemas.replies import SuggestedReply


DEFAULT_INTENT = "General inquiry"


class PipelineState(str, Enum):
    """Where a suggestion request is in the pipeline."""
    IDLE = "idle"
    CLASSIFYING = "classifying"
    RETRIEVING = "retrieving"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    ERROR = "error"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class EmailContext:
    """Incoming email the replies are suggested for. Built once per request."""

    subject: str
    body: str
    sender: str
    to: Tuple[str, ...] = ()
    date: Optional[str] = None

    @property
    def sender_name(self) -> str:
        """Local part of the sender address, or 'there' if it is empty."""
        return self.sender.split("@")[0] or "there"


@dataclass
class ReplyPipelineData:
    """
    In-memory state passed between pipeline steps. Not persisted.
    """

    # Input data (set by the orchestrator from the API request)
    task_id: str
    """Request ID - used for correlation in Logfire"""

    email: EmailContext
    """Email being replied to"""

    state: PipelineState = PipelineState.IDLE
    """Current pipeline state, advanced by each step"""

    # Step 1 outputs (IntentClassifier)
    intent: str = DEFAULT_INTENT
    """One-sentence description of what the sender wants"""

    # Step 2 outputs (KnowledgeRetrieval)
    search_query: str = ""
    """Text used for both similarity searches: subject + body + intent"""

    knowledge_results: List[KnowledgeMatch] = field(default_factory=list)
    """Knowledge snippets, most similar first"""

    template_results: List[TemplateMatch] = field(default_factory=list)
    """Reply templates, most similar first"""

    # Step 3 outputs (ReplySynthesizer)
    suggestions: List[SuggestedReply] = field(default_factory=list)
    """Ordered candidate replies: template, AI-contextual, quick response"""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Per-step details (strategies used, model names)"""

    # Transient data (logged to Logfire, not persisted)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """Pipeline start time"""

    step_timings: Dict[str, float] = field(default_factory=dict)
    """
    Duration of each step in seconds.
    Example: {"intent_classifier": 0.8, "knowledge_retrieval": 1.1, ...}
    """

    errors: List[str] = field(default_factory=list)
    """
    Non-fatal errors encountered during execution.
    Fatal errors raise exceptions and send the request to the fallback reply.
    """

    # ===================================================================
    # HELPER METHODS
    # ===================================================================

    def total_duration(self) -> float:
        """Calculate total pipeline execution time in seconds"""
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()

    def add_timing(self, step_name: str, duration: float) -> None:
        """Record step timing"""
        self.step_timings[step_name] = duration

    def add_error(self, step_name: str, error_message: str) -> None:
        """Record non-fatal error"""
        self.errors.append(f"{step_name}: {error_message}")


# ===================================================================
# STEP RESULT
# ===================================================================

@dataclass
class StepResult:
    """
    Result of a pipeline step execution.

    Returned by BasePipelineStep.execute() to indicate success/failure.
    """

    success: bool
    """Whether the step completed successfully"""

    step_name: str
    """Name of the step that produced this result"""

    error: Optional[str] = None
    """Error message if success=False"""

    metadata: Optional[Dict[str, Any]] = None
    """
    Optional metadata about execution:
    - duration: float (seconds)
    - suggestion_count: int
    - strategies: list of strategy names that contributed
    """

    warnings: List[str] = field(default_factory=list)
    """Non-fatal warnings (e.g., 'classifier fell back to default intent')"""

    def __post_init__(self):
        """Validation: if success=False, error must be set"""
        if not self.success and not self.error:
            raise ValueError("StepResult with success=False must have error message")


# ===================================================================
# STRATEGY RESULT
# ===================================================================

@dataclass
class StrategyResult:
    """
    Outcome of one reply strategy inside the synthesizer.

    success=True with suggestion=None means the strategy did not apply
    (e.g. no template above the similarity gate).
    """

    success: bool
    strategy: str
    suggestion: Optional[SuggestedReply] = None
    error: Optional[str] = None

    def __post_init__(self):
        if not self.success and not self.error:
            raise ValueError("StrategyResult with success=False must have error message")

    @classmethod
    def produced(cls, strategy: str, suggestion: SuggestedReply) -> "StrategyResult":
        return cls(success=True, strategy=strategy, suggestion=suggestion)

    @classmethod
    def skipped(cls, strategy: str) -> "StrategyResult":
        return cls(success=True, strategy=strategy)

    @classmethod
    def failed(cls, strategy: str, error: str) -> "StrategyResult":
        return cls(success=False, strategy=strategy, error=error)
