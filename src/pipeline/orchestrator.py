"""
orchestrator.py

Submission orchestrator for daily sales forecasting.
Parses raw input, requests a forecast, renders the historical-only series,
then reveals the complete series and summary after a short delay.
"""

import logging
import threading
from datetime import date
from typing import Callable, Optional, Protocol, Sequence, Tuple

from src.api.forecast_client import ForecastClient
from src.monitoring.error_logging import ErrorComponent, ErrorLogger
from src.pipeline.errors import (
    ExternalServiceError,
    InputValidationError,
    SubmissionInProgressError,
)
from src.pipeline.state_manager import PipelineState, StateManager
from src.timeseries.date_aligner import align_future, align_historical
from src.timeseries.series_merger import UnifiedSeries, historical_series, merge_series
from src.timeseries.summary import SummaryStats, summarize
from src.utils.config_loader import load_typed_config
from src.utils.logger import configure_package_logging
from src.validation.input_parser import SalesInputParser

SERVICE_ERROR_MESSAGE = "Error fetching prediction. Please make sure the backend server is running."


class Renderer(Protocol):
    def render(self, series: UnifiedSeries, summary: Optional[SummaryStats]) -> None: ...


class Shell(Protocol):
    def set_loading(self, loading: bool) -> None: ...

    def report_error(self, message: str, error: Exception) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


class _NullCollaborator:
    """Renderer and shell that ignore every call."""

    def render(self, series, summary) -> None:
        pass

    def set_loading(self, loading: bool) -> None:
        pass

    def report_error(self, message: str, error: Exception) -> None:
        pass


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run ``callback`` on a daemon timer thread after ``delay`` seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class PipelineOrchestrator:
    """
    Orchestrates one forecast submission at a time.

    Attributes:
        client (ForecastClient): Forecast service client.
        renderer (Renderer): Receives the historical-only and complete series.
        shell (Shell): Receives loading flags and user-facing errors.
        state_manager (StateManager): State machine and submission records.
        latest_series (UnifiedSeries | None): Most recently rendered series.
        latest_summary (SummaryStats | None): Summary of the most recent reveal.
        last_error (Exception | None): Error of the most recent failed submission.
    """

    def __init__(
        self,
        client: ForecastClient,
        renderer: Optional[Renderer] = None,
        shell: Optional[Shell] = None,
        prediction_length: int = 20,
        min_history: int = 40,
        reveal_delay: float = 0.5,
        label_format: Optional[str] = None,
        scheduler: Scheduler = timer_scheduler,
        clock: Callable[[], date] = date.today,
    ) -> None:
        if reveal_delay < 0:
            raise ValueError("reveal_delay must be non-negative")
        self.client = client
        self.renderer = renderer or _NullCollaborator()
        self.shell = shell or _NullCollaborator()
        self.parser = SalesInputParser(min_values=min_history)
        self.prediction_length = prediction_length
        self.reveal_delay = reveal_delay
        self.label_format = label_format
        self.scheduler = scheduler
        self.clock = clock

        self.state_manager = StateManager()
        self.error_logger = ErrorLogger(ErrorComponent.ORCHESTRATOR)
        self.latest_series: Optional[UnifiedSeries] = None
        self.latest_summary: Optional[SummaryStats] = None
        self.last_error: Optional[Exception] = None

        self._lock = threading.RLock()
        self._pending_reveal: Optional[Cancellable] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(
        cls,
        config_path: Optional[str] = None,
        renderer: Optional[Renderer] = None,
        shell: Optional[Shell] = None,
        client: Optional[ForecastClient] = None,
        scheduler: Scheduler = timer_scheduler,
    ) -> "PipelineOrchestrator":
        """Build an orchestrator from the YAML config plus environment overrides."""
        config = load_typed_config(config_path)
        configure_package_logging(config.logging.level, config.logging.file)
        return cls(
            client=client or ForecastClient.from_config(config),
            renderer=renderer,
            shell=shell,
            prediction_length=config.forecast.prediction_length,
            min_history=config.validation.min_history,
            reveal_delay=config.presentation.reveal_delay_seconds,
            label_format=config.presentation.date_label_format,
            scheduler=scheduler,
        )

    @property
    def state(self) -> PipelineState:
        return self.state_manager.state

    def submit(self, raw_input: str) -> int:
        """
        Run one submission: validate, forecast, stage the reveal.

        Validation and service errors are reported to the shell once and
        leave the orchestrator idle; they are not raised.

        Args:
            raw_input (str): Comma-separated historical sales values.

        Returns:
            int: Identifier of this submission.

        Raises:
            SubmissionInProgressError: If a submission is still validating
                or waiting on the forecast.
        """
        with self._lock:
            if self.state_manager.is_busy:
                self.logger.warning(
                    f"Rejected submission while {self.state.value} "
                    f"(submission {self.state_manager.current_submission_id})"
                )
                raise SubmissionInProgressError("A forecast request is already in progress")
            self._cancel_pending_locked()
            submission_id = self.state_manager.begin_submission()
            anchor = self.clock()

        try:
            self.shell.set_loading(True)
            try:
                values = self.parser.parse(raw_input)
                with self._lock:
                    self.state_manager.transition(PipelineState.AWAITING_FORECAST)
                prediction = self.client.predict(values, self.prediction_length)
            except InputValidationError as exc:
                self._fail(submission_id, exc, exc.message)
                return submission_id
            except ExternalServiceError as exc:
                self._fail(submission_id, exc, SERVICE_ERROR_MESSAGE)
                return submission_id
            except Exception as exc:
                self._fail(submission_id, exc, str(exc))
                raise
            finally:
                self.shell.set_loading(False)
        except BaseException:
            # Interrupts (e.g. a Streamlit rerun) must not leave the pipeline busy
            self._release_if_busy(submission_id)
            raise

        self._stage_reveal(submission_id, values, prediction, anchor)
        return submission_id

    def cancel_pending_reveal(self) -> None:
        """Drop a scheduled reveal; the historical-only series stays rendered."""
        with self._lock:
            self._cancel_pending_locked()

    def _cancel_pending_locked(self) -> None:
        if self._pending_reveal is not None:
            self._pending_reveal.cancel()
            self._pending_reveal = None
            self.logger.info("Cancelled pending reveal")

    def _stage_reveal(
        self,
        submission_id: int,
        values: Sequence[float],
        prediction: Tuple[float, ...],
        anchor: date,
    ) -> None:
        with self._lock:
            if not self.state_manager.is_current(submission_id):
                return
            self.state_manager.transition(PipelineState.MERGING)
            historical_dates = align_historical(len(values), anchor)
            self.latest_series = historical_series(values, historical_dates, self.label_format)
            self.latest_summary = None
            self.renderer.render(self.latest_series, None)

        def reveal() -> None:
            self._reveal(submission_id, values, historical_dates, prediction)

        if self.reveal_delay == 0:
            reveal()
            return

        handle = self.scheduler(self.reveal_delay, reveal)
        with self._lock:
            if self.state_manager.is_current(submission_id) and self.state is PipelineState.MERGING:
                self._pending_reveal = handle

    def _reveal(
        self,
        submission_id: int,
        values: Sequence[float],
        historical_dates: Sequence[date],
        prediction: Tuple[float, ...],
    ) -> None:
        with self._lock:
            if not self.state_manager.is_current(submission_id) or self.state is not PipelineState.MERGING:
                self.logger.info(f"Discarding stale reveal for submission {submission_id}")
                return
            self._pending_reveal = None

            try:
                future_dates = align_future(historical_dates[-1], len(prediction))
                complete = merge_series(
                    values, historical_dates, prediction, future_dates, self.label_format
                )
                stats = summarize(prediction)
            except (ValueError, ArithmeticError) as exc:
                self._fail(submission_id, exc, str(exc))
                return

            self.latest_series = complete
            self.latest_summary = stats
            self.last_error = None
            self.state_manager.mark_revealed(submission_id, result=stats.to_dict())
            self.renderer.render(complete, stats)

    def _release_if_busy(self, submission_id: int) -> None:
        with self._lock:
            if self.state_manager.is_current(submission_id) and self.state_manager.is_busy:
                self.logger.warning(f"Submission {submission_id} interrupted while {self.state.value}")
                self.state_manager.mark_failed(submission_id, "interrupted")

    def _fail(self, submission_id: int, exc: Exception, message: str) -> None:
        with self._lock:
            self.last_error = exc
            self.error_logger.log_error(
                message, exception=exc, context={"submission_id": submission_id}
            )
            self.state_manager.mark_failed(submission_id, str(exc))
            self.shell.report_error(message, exc)
