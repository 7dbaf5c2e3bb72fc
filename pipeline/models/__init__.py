"""
Models package for Pipeline models

NOTE: not database models
"""

from .core import (
    # Enums
    PipelineState,

    # Core data models
    EmailContext,
    ReplyPipelineData,
    StepResult,
    StrategyResult,

    # Constants
    DEFAULT_INTENT,
)

__all__ = [
    # Enums
    "PipelineState",

    # Core data models
    "EmailContext",
    "ReplyPipelineData",
    "StepResult",
    "StrategyResult",

    # Constants
    "DEFAULT_INTENT",
]
