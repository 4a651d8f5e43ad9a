# src/monitoring/error_logging.py
"""
Error Logging Framework for Daily Sales Forecasting.

Gives every component a tagged error logger so failures surfaced to the
user are also visible in the logs with their reason and context.
Records are kept in memory only; nothing is written to disk.
"""

import logging
import traceback
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum

from src.pipeline.errors import (
    ExternalServiceError,
    InputValidationError,
    SubmissionInProgressError,
    ValidationReason,
)


class ErrorComponent(Enum):
    """Component identifiers for error tracking."""
    INPUT_PARSER = "input_parser"
    FORECAST_CLIENT = "forecast_client"
    ORCHESTRATOR = "orchestrator"
    DASHBOARD = "dashboard"


class ErrorReason(Enum):
    """Reasons a submission failed."""
    INSUFFICIENT_DATA = "insufficient_data"
    MALFORMED_VALUE = "malformed_value"
    EXTERNAL_API_FAILURE = "external_api_failure"
    SUBMISSION_IN_PROGRESS = "submission_in_progress"
    UNKNOWN = "unknown"


def classify_exception(exception: Exception) -> ErrorReason:
    """Map a pipeline exception onto an ErrorReason."""
    if isinstance(exception, InputValidationError):
        if exception.reason is ValidationReason.INSUFFICIENT_DATA:
            return ErrorReason.INSUFFICIENT_DATA
        return ErrorReason.MALFORMED_VALUE
    if isinstance(exception, ExternalServiceError):
        return ErrorReason.EXTERNAL_API_FAILURE
    if isinstance(exception, SubmissionInProgressError):
        return ErrorReason.SUBMISSION_IN_PROGRESS
    return ErrorReason.UNKNOWN


class ErrorLogger:
    """
    Structured error logging with component tagging.

    Usage:
        error_logger = ErrorLogger(component=ErrorComponent.FORECAST_CLIENT)
        try:
            prediction = client.predict(values, 20)
        except ExternalServiceError as exc:
            error_logger.log_error(
                "Forecast request failed",
                exception=exc,
                context={"submission_id": 3},
            )
            raise
    """

    def __init__(self, component: ErrorComponent, base_logger: Optional[logging.Logger] = None,
                 max_history: int = 100):
        """
        Initialize error logger for a specific component.

        Args:
            component: ErrorComponent enum identifying the component
            base_logger: Optional logging.Logger to use (creates default if None)
            max_history: Number of records kept in memory
        """
        self.component = component
        self.logger = base_logger or logging.getLogger(f"src.error.{component.value}")
        self.max_history = max_history

        self.error_count = 0
        self.error_history: list[Dict[str, Any]] = []

    def log_error(
        self,
        error_msg: str,
        exception: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: str = "warning",
    ) -> Dict[str, Any]:
        """
        Log an error with component tag, reason and context.

        Args:
            error_msg: Description of the error
            exception: Optional exception object
            context: Optional context dict
            severity: 'debug', 'info', 'warning', 'error', 'critical'

        Returns:
            The error record that was stored.
        """
        self.error_count += 1
        reason = classify_exception(exception) if exception else ErrorReason.UNKNOWN

        error_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": self.component.value,
            "reason": reason.value,
            "message": error_msg,
            "exception_type": type(exception).__name__ if exception else None,
            "exception_message": str(exception) if exception else None,
            "traceback": traceback.format_exc() if exception else None,
            "context": context or {},
            "severity": severity,
        }

        self.error_history.append(error_record)
        if len(self.error_history) > self.max_history:
            del self.error_history[: len(self.error_history) - self.max_history]

        log_func = getattr(self.logger, severity, self.logger.warning)
        context_str = ", ".join(f"{k}={v}" for k, v in (context or {}).items())
        exc_str = f": {exception}" if exception else ""
        log_func(
            f"[{self.component.value.upper()}] {error_msg} ({reason.value}){exc_str} "
            f"| Context: {context_str}"
        )
        return error_record

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary statistics of errors logged by this component."""
        return {
            "component": self.component.value,
            "total_errors": self.error_count,
            "recent_errors": self.error_history[-10:],
        }

    def clear_history(self) -> None:
        """Clear in-memory error history."""
        self.error_history.clear()


def create_component_logger(component: ErrorComponent) -> ErrorLogger:
    """Create a component-specific error logger."""
    return ErrorLogger(component=component)
