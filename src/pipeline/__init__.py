"""
src/pipeline/__init__.py

Pipeline package initializer.

The orchestrator is the only recommended entrypoint for running a
submission; tests may import the individual stages directly.
"""
from .errors import (
    ConfigurationError,
    ExternalServiceError,
    ForecastPipelineError,
    InputValidationError,
    StateTransitionError,
    SubmissionInProgressError,
    ValidationReason,
)
from .state_manager import PipelineState, StateManager, SubmissionStatus

__all__ = [
    "ConfigurationError",
    "ExternalServiceError",
    "ForecastPipelineError",
    "InputValidationError",
    "StateTransitionError",
    "SubmissionInProgressError",
    "ValidationReason",
    "PipelineState",
    "StateManager",
    "SubmissionStatus",
]
