"""Pipeline state machine and submission bookkeeping."""

from typing import Dict, Optional, Any
from enum import Enum
from datetime import datetime, timezone
import logging

from src.pipeline.errors import StateTransitionError

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Orchestrator state enumeration."""
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_FORECAST = "awaiting_forecast"
    MERGING = "merging"
    REVEALED = "revealed"
    FAILED = "failed"


class SubmissionStatus(Enum):
    """Outcome of a single submission."""
    RUNNING = "running"
    REVEALED = "revealed"
    FAILED = "failed"
    SUPERSEDED = "superseded"


ALLOWED_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.VALIDATING},
    PipelineState.VALIDATING: {PipelineState.AWAITING_FORECAST, PipelineState.FAILED},
    PipelineState.AWAITING_FORECAST: {PipelineState.MERGING, PipelineState.FAILED},
    # MERGING -> IDLE when a newer submission supersedes a pending reveal
    PipelineState.MERGING: {PipelineState.REVEALED, PipelineState.FAILED, PipelineState.IDLE},
    PipelineState.REVEALED: {PipelineState.IDLE},
    PipelineState.FAILED: {PipelineState.IDLE},
}

BUSY_STATES = {PipelineState.VALIDATING, PipelineState.AWAITING_FORECAST}


class StateManager:
    """Track the orchestrator state and per-submission outcomes in memory.

    Not thread-safe on its own; the orchestrator serializes access.
    """

    def __init__(self, max_history: int = 50):
        """Initialize state manager.

        Args:
            max_history: Number of submission records kept in memory.
        """
        self.state = PipelineState.IDLE
        self.current_submission_id = 0
        self.max_history = max_history
        self.submissions: Dict[int, Dict[str, Any]] = {}

    @property
    def is_busy(self) -> bool:
        """True while a submission is validating or waiting on the forecast."""
        return self.state in BUSY_STATES

    def transition(self, target: PipelineState) -> None:
        """Move to ``target`` if the state machine allows it.

        Raises:
            StateTransitionError: If the transition is not allowed.
        """
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise StateTransitionError(self.state.value, target.value)
        logger.debug(
            f"Submission {self.current_submission_id}: {self.state.value} -> {target.value}"
        )
        self.state = target

    def begin_submission(self) -> int:
        """Start a new submission from IDLE and return its identifier.

        A pending reveal (MERGING) is marked superseded; a finished
        submission (REVEALED/FAILED) returns to IDLE first.
        """
        if self.state is PipelineState.MERGING:
            self._update(self.current_submission_id, SubmissionStatus.SUPERSEDED)
        if self.state is not PipelineState.IDLE:
            self.transition(PipelineState.IDLE)

        self.current_submission_id += 1
        submission_id = self.current_submission_id
        self.submissions[submission_id] = {
            "submission_id": submission_id,
            "status": SubmissionStatus.RUNNING.value,
            "started_at": datetime.now(timezone.utc).isoformat(),
            "ended_at": None,
            "error": None,
        }
        self._trim_history()
        self.transition(PipelineState.VALIDATING)
        logger.info(f"Submission {submission_id} started")
        return submission_id

    def is_current(self, submission_id: int) -> bool:
        return submission_id == self.current_submission_id

    def mark_revealed(self, submission_id: int, result: Optional[Dict[str, Any]] = None) -> None:
        """Mark the current submission as fully revealed."""
        self.transition(PipelineState.REVEALED)
        self._update(submission_id, SubmissionStatus.REVEALED, result=result or {})
        logger.info(f"Submission {submission_id} revealed")

    def mark_failed(self, submission_id: int, error: str) -> None:
        """Mark the current submission as failed and settle back in IDLE."""
        self.transition(PipelineState.FAILED)
        self._update(submission_id, SubmissionStatus.FAILED, error=str(error)[:500])
        self.transition(PipelineState.IDLE)
        logger.info(f"Submission {submission_id} failed; pipeline idle")

    def get_submission(self, submission_id: int) -> Optional[Dict[str, Any]]:
        return self.submissions.get(submission_id)

    def get_summary(self) -> Dict[str, Any]:
        """Counts of recorded submissions by status."""
        counts = {status.value: 0 for status in SubmissionStatus}
        for record in self.submissions.values():
            counts[record["status"]] += 1
        return {"state": self.state.value, "total": len(self.submissions), **counts}

    def _update(self, submission_id: int, status: SubmissionStatus, **fields: Any) -> None:
        record = self.submissions.get(submission_id)
        if record is None:
            return
        record.update(
            status=status.value,
            ended_at=datetime.now(timezone.utc).isoformat(),
            **fields,
        )

    def _trim_history(self) -> None:
        while len(self.submissions) > self.max_history:
            del self.submissions[min(self.submissions)]
