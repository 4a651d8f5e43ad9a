# src/pipeline/errors.py
"""
Custom Exceptions for the Forecast Pipeline
-------------------------------------------

Every error raised while handling a submission derives from
ForecastPipelineError so the orchestrator can catch, report and
return to idle in one place.
"""

from enum import Enum
from typing import Optional


class ValidationReason(Enum):
    """Why raw sales input was rejected."""
    INSUFFICIENT_DATA = "insufficient_data"
    MALFORMED_VALUE = "malformed_value"


class ForecastPipelineError(Exception):
    """
    Base exception for all forecast pipeline errors.
    """
    pass


class ConfigurationError(ForecastPipelineError):
    """
    Raised when required configuration is missing or invalid,
    such as an unset forecast endpoint.
    """
    pass


class InputValidationError(ForecastPipelineError):
    """
    Raised when raw sales input cannot become a numeric sequence.
    """

    def __init__(
        self,
        reason: ValidationReason,
        message: str,
        token: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.reason = reason
        self.token = token
        self.position = position
        self.message = message
        super().__init__(message)


class ExternalServiceError(ForecastPipelineError):
    """
    Raised for network failures, timeouts, non-success statuses or
    malformed bodies from the forecasting service.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class SubmissionInProgressError(ForecastPipelineError):
    """
    Raised when a submission is attempted while another one is
    still validating or waiting on the forecast.
    """
    pass


class StateTransitionError(ForecastPipelineError):
    """
    Raised when the orchestrator attempts a transition its state
    machine does not allow.
    """

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid pipeline transition: {current} -> {target}")
