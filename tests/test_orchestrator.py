import logging
from datetime import date

import pytest

import src.pipeline.orchestrator as orchestrator
from src.pipeline.errors import (
    ConfigurationError,
    ExternalServiceError,
    InputValidationError,
    SubmissionInProgressError,
    ValidationReason,
)
from src.pipeline.state_manager import PipelineState, SubmissionStatus
from src.timeseries.summary import SummaryStats
from src.utils.config_loader import FORECAST_API_URL_ENV

ANCHOR = date(2024, 6, 1)


def _raw(values):
    return ",".join(str(v) for v in values)


class FakeClient:
    """Records calls and returns a fixed prediction or raises."""

    def __init__(self, prediction=None, error=None):
        self.prediction = prediction if prediction is not None else [1000.0] * 20
        self.error = error
        self.calls = []
        self.on_call = None

    def predict(self, sales_data, prediction_length=20):
        self.calls.append((tuple(sales_data), prediction_length))
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return tuple(self.prediction)


class RecordingRenderer:
    def __init__(self):
        self.renders = []

    def render(self, series, summary):
        self.renders.append((series, summary))


class RecordingShell:
    def __init__(self):
        self.loading = []
        self.errors = []

    def set_loading(self, loading):
        self.loading.append(loading)

    def report_error(self, message, error):
        self.errors.append((message, error))


class ManualScheduler:
    """Collects scheduled callbacks so tests decide when each reveal fires."""

    class Handle:
        def __init__(self):
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.scheduled = []

    def __call__(self, delay, callback):
        handle = self.Handle()
        self.scheduled.append((delay, callback, handle))
        return handle

    def fire(self, index):
        _, callback, _ = self.scheduled[index]
        callback()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def shell():
    return RecordingShell()


@pytest.fixture
def scheduler():
    return ManualScheduler()


def make_orchestrator(client, renderer, shell, scheduler=None, reveal_delay=0.5, **kwargs):
    return orchestrator.PipelineOrchestrator(
        client=client,
        renderer=renderer,
        shell=shell,
        reveal_delay=reveal_delay,
        scheduler=scheduler or ManualScheduler(),
        clock=lambda: ANCHOR,
        **kwargs,
    )


# -------------------------------------------------------------------------
# Successful submissions
# -------------------------------------------------------------------------

def test_constant_scenario(renderer, shell, scheduler):
    """40 x 1000 with a forecast of 20 x 1000 gives a 60-point series of 1000s."""
    client = FakeClient(prediction=[1000.0] * 20)
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw([1000] * 40))
    scheduler.fire(0)

    assert client.calls == [((1000.0,) * 40, 20)]
    assert len(orch.latest_series) == 60
    assert all(p.actual in (None, 1000.0) for p in orch.latest_series)
    assert all(p.predicted in (None, 1000.0) for p in orch.latest_series)
    assert orch.latest_summary == SummaryStats(average=1000, max=1000.0, min=1000.0)
    assert orch.state is PipelineState.REVEALED


def test_staged_reveal_renders_twice(renderer, shell, scheduler):
    client = FakeClient(prediction=[float(i) for i in range(20)])
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw(range(100, 140)))

    # Historical-only render happens before the delay fires
    assert len(renderer.renders) == 1
    historical, summary = renderer.renders[0]
    assert summary is None
    assert len(historical) == 40
    assert all(p.predicted is None for p in historical)
    assert historical[-1].day == date(2024, 5, 31)
    assert orch.state is PipelineState.MERGING
    assert scheduler.scheduled[0][0] == 0.5

    scheduler.fire(0)

    assert len(renderer.renders) == 2
    complete, summary = renderer.renders[1]
    assert len(complete) == 60
    assert [i for i, p in enumerate(complete) if p.is_boundary] == [39]
    assert complete[39].predicted == 139.0
    assert complete[40].day == date(2024, 6, 1)
    assert summary == SummaryStats(average=10, max=19.0, min=0.0)
    assert shell.loading == [True, False]
    assert shell.errors == []


def test_zero_delay_reveals_immediately(renderer, shell, scheduler):
    orch = make_orchestrator(FakeClient(), renderer, shell, scheduler, reveal_delay=0)

    orch.submit(_raw([5] * 40))

    assert scheduler.scheduled == []
    assert len(renderer.renders) == 2
    assert orch.state is PipelineState.REVEALED


def test_label_format_is_applied(renderer, shell):
    orch = make_orchestrator(FakeClient(), renderer, shell, reveal_delay=0, label_format="%m/%d")

    orch.submit(_raw([5] * 40))

    assert orch.latest_series[39].date == "05/31"
    assert orch.latest_series[40].date == "06/01"


def test_new_submission_after_reveal(renderer, shell):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, reveal_delay=0)

    first = orch.submit(_raw([1] * 40))
    second = orch.submit(_raw([2] * 45))

    assert second == first + 1
    assert len(orch.latest_series) == 65
    assert orch.state is PipelineState.REVEALED


# -------------------------------------------------------------------------
# Failures
# -------------------------------------------------------------------------

def test_insufficient_data_does_not_call_service(renderer, shell, scheduler):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw([1] * 39))

    assert client.calls == []
    assert orch.state is PipelineState.IDLE
    assert orch.latest_series is None
    assert renderer.renders == []
    assert len(shell.errors) == 1
    message, error = shell.errors[0]
    assert isinstance(error, InputValidationError)
    assert error.reason is ValidationReason.INSUFFICIENT_DATA
    assert message == "Please provide a minimum of 40 values separated by commas."


def test_malformed_value_reported(renderer, shell):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell)

    orch.submit(_raw([1] * 39 + ["oops"]))

    assert client.calls == []
    assert shell.errors[0][1].reason is ValidationReason.MALFORMED_VALUE
    assert "oops" in shell.errors[0][0]


def test_service_error_reported_once(renderer, shell, scheduler):
    """An HTTP error leaves the orchestrator idle, with no series and one report."""
    client = FakeClient(error=ExternalServiceError("500 Server Error", status_code=500))
    orch = make_orchestrator(client, renderer, shell, scheduler)

    submission_id = orch.submit(_raw([1000] * 40))

    assert orch.state is PipelineState.IDLE
    assert orch.latest_series is None
    assert orch.latest_summary is None
    assert renderer.renders == []
    assert scheduler.scheduled == []
    assert len(shell.errors) == 1
    assert shell.errors[0][0] == orchestrator.SERVICE_ERROR_MESSAGE
    assert isinstance(orch.last_error, ExternalServiceError)
    assert shell.loading == [True, False]
    assert orch.error_logger.error_count == 1
    record = orch.state_manager.get_submission(submission_id)
    assert record["status"] == SubmissionStatus.FAILED.value


def test_failure_keeps_previous_results(renderer, shell):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, reveal_delay=0)
    orch.submit(_raw([1] * 40))
    revealed = orch.latest_series

    client.error = ExternalServiceError("timeout")
    orch.submit(_raw([1] * 40))

    assert orch.latest_series is revealed
    assert orch.state is PipelineState.IDLE


def test_unexpected_error_propagates_and_resets(renderer, shell):
    client = FakeClient(error=RuntimeError("bug"))
    orch = make_orchestrator(client, renderer, shell)

    with pytest.raises(RuntimeError):
        orch.submit(_raw([1] * 40))

    assert orch.state is PipelineState.IDLE
    assert len(shell.errors) == 1


def test_reveal_of_huge_forecast(renderer, shell, scheduler):
    orch = make_orchestrator(FakeClient(prediction=[1.7e308] * 20), renderer, shell, scheduler)

    orch.submit(_raw([1] * 40))
    scheduler.fire(0)

    assert orch.state is PipelineState.REVEALED
    assert orch.latest_summary.max == 1.7e308
    assert shell.errors == []


def test_arithmetic_error_during_reveal_is_reported(renderer, shell, scheduler, monkeypatch):
    def overflow(_):
        raise OverflowError("cannot convert float infinity to integer")

    monkeypatch.setattr(orchestrator, "summarize", overflow)
    orch = make_orchestrator(FakeClient(), renderer, shell, scheduler)

    orch.submit(_raw([1] * 40))
    scheduler.fire(0)

    assert orch.state is PipelineState.IDLE
    assert isinstance(orch.last_error, OverflowError)
    assert len(shell.errors) == 1
    assert len(renderer.renders) == 1


def test_reveal_with_mismatched_prediction_fails_cleanly(renderer, shell, scheduler):
    client = FakeClient(prediction=[])
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw([1] * 40))
    scheduler.fire(0)

    assert orch.state is PipelineState.IDLE
    assert len(shell.errors) == 1
    assert len(renderer.renders) == 1


# -------------------------------------------------------------------------
# Concurrency
# -------------------------------------------------------------------------

def test_rejects_submission_while_awaiting_forecast(renderer, shell):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, reveal_delay=0)
    nested = {}

    def resubmit():
        with pytest.raises(SubmissionInProgressError):
            orch.submit(_raw([2] * 40))
        nested["state"] = orch.state

    client.on_call = resubmit
    orch.submit(_raw([1] * 40))

    assert nested["state"] is PipelineState.AWAITING_FORECAST
    assert len(client.calls) == 1
    assert orch.state is PipelineState.REVEALED


class ScriptRerun(BaseException):
    """Stands in for a UI framework interrupt that bypasses ``except Exception``."""


class InterruptingShell(RecordingShell):
    """Raises ScriptRerun the first time loading is switched off."""

    def __init__(self):
        super().__init__()
        self.interrupted = False

    def set_loading(self, loading):
        super().set_loading(loading)
        if not loading and not self.interrupted:
            self.interrupted = True
            raise ScriptRerun()


def test_interrupt_while_awaiting_forecast_releases_pipeline(renderer):
    shell = InterruptingShell()
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, reveal_delay=0)

    with pytest.raises(ScriptRerun):
        orch.submit(_raw([1] * 40))

    assert orch.state is PipelineState.IDLE
    assert orch.state_manager.get_submission(1)["status"] == SubmissionStatus.FAILED.value
    assert renderer.renders == []

    second = orch.submit(_raw([2] * 40))

    assert second == 2
    assert orch.state is PipelineState.REVEALED
    assert len(client.calls) == 2
    assert {p.actual for p in orch.latest_series if p.actual is not None} == {2.0}


def test_interrupt_from_service_call_releases_pipeline(renderer, shell):
    client = FakeClient(error=KeyboardInterrupt())
    orch = make_orchestrator(client, renderer, shell)

    with pytest.raises(KeyboardInterrupt):
        orch.submit(_raw([1] * 40))

    assert orch.state is PipelineState.IDLE
    assert shell.loading == [True, False]
    assert shell.errors == []


def test_newer_submission_wins_race(renderer, shell, scheduler):
    """B starting before A's reveal fires means only B's data is revealed."""
    client = FakeClient(prediction=[10.0] * 20)
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw([1] * 40))
    client.prediction = [20.0] * 20
    orch.submit(_raw([2] * 50))

    assert scheduler.scheduled[0][2].cancelled
    # A's stale callback fires anyway and must be ignored
    scheduler.fire(0)
    assert orch.state is PipelineState.MERGING
    assert all(p.actual == 2.0 for p in orch.latest_series)

    scheduler.fire(1)

    assert len(orch.latest_series) == 70
    assert {p.actual for p in orch.latest_series if p.actual is not None} == {2.0}
    assert {p.predicted for p in orch.latest_series[50:]} == {20.0}
    assert orch.latest_summary.average == 20
    assert all(summary is None or summary.average == 20 for _, summary in renderer.renders)
    assert orch.state_manager.get_submission(1)["status"] == SubmissionStatus.SUPERSEDED.value


def test_stale_reveal_after_failed_newer_submission(renderer, shell, scheduler):
    client = FakeClient()
    orch = make_orchestrator(client, renderer, shell, scheduler)

    orch.submit(_raw([1] * 40))
    orch.submit(_raw([1] * 10))
    scheduler.fire(0)

    assert orch.state is PipelineState.IDLE
    assert orch.latest_summary is None


def test_cancel_pending_reveal(renderer, shell, scheduler):
    orch = make_orchestrator(FakeClient(), renderer, shell, scheduler)
    orch.submit(_raw([1] * 40))

    orch.cancel_pending_reveal()

    assert scheduler.scheduled[0][2].cancelled


def test_timer_scheduler_runs_callback():
    import threading

    fired = threading.Event()
    timer = orchestrator.timer_scheduler(0.01, fired.set)

    assert fired.wait(timeout=2)
    assert timer.daemon


def test_negative_delay_rejected(renderer, shell):
    with pytest.raises(ValueError):
        make_orchestrator(FakeClient(), renderer, shell, reveal_delay=-1)


# -------------------------------------------------------------------------
# Configuration
# -------------------------------------------------------------------------

@pytest.fixture
def restore_package_logger():
    """from_config attaches handlers to the package logger; undo that after the test."""
    package_logger = logging.getLogger("src")
    saved_handlers, saved_level = list(package_logger.handlers), package_logger.level
    yield
    package_logger.handlers = saved_handlers
    package_logger.setLevel(saved_level)


def test_from_config(tmp_path, monkeypatch, restore_package_logger):
    monkeypatch.setenv(FORECAST_API_URL_ENV, "http://svc/predict")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "forecast:\n  prediction_length: 10\n"
        "validation:\n  min_history: 5\n"
        "presentation:\n  reveal_delay_seconds: 0\n"
    )

    orch = orchestrator.PipelineOrchestrator.from_config(str(config_file))

    assert orch.client.api_url == "http://svc/predict"
    assert orch.prediction_length == 10
    assert orch.parser.min_values == 5
    assert orch.reveal_delay == 0


def test_from_config_without_url(monkeypatch, restore_package_logger):
    monkeypatch.delenv(FORECAST_API_URL_ENV, raising=False)
    with pytest.raises(ConfigurationError):
        orchestrator.PipelineOrchestrator.from_config()
