"""
Custom exceptions for pipeline execution.

The orchestrator catches PipelineExecutionError (and anything else) at its
boundary and answers with the fallback reply.
"""


class PipelineExecutionError(Exception):
    """
    Base exception for pipeline execution failures.

    All step-specific exceptions inherit from this.
    """
    pass


class StepExecutionError(PipelineExecutionError):
    """
    Raised when a pipeline step fails.

    Attributes:
        step_name: Name of the failed step
        original_error: The underlying exception
    """

    def __init__(self, step_name: str, original_error: Exception):
        self.step_name = step_name
        self.original_error = original_error
        error_message = f"Step '{step_name}' failed: {str(original_error)}"
        super().__init__(error_message)


class ValidationError(PipelineExecutionError):
    """
    Raised when step input validation fails.

    Example: reply synthesizer runs before the retrieval step set a search query
    """
    pass


class ExternalAPIError(PipelineExecutionError):
    """
    Raised when an external API call fails (chat completion, vector store).
    """
    pass
