# src/dashboard/app.py
#
# Run with: streamlit run src/dashboard/app.py

import os

import streamlit as st

from src.dashboard.forecast_panel import ForecastPanel, StreamlitShell
from src.dashboard.sample_data import SAMPLES
from src.dashboard.utils import blocking_scheduler, get_ui_logger
from src.monitoring.error_logging import ErrorComponent, ErrorLogger
from src.pipeline.errors import ConfigurationError, SubmissionInProgressError
from src.pipeline.orchestrator import PipelineOrchestrator

logger = get_ui_logger("app")
error_logger = ErrorLogger(ErrorComponent.DASHBOARD, base_logger=logger)

CONFIG_PATH = os.getenv("SALES_FORECAST_CONFIG", "config/config.yaml")


def _get_orchestrator(panel: ForecastPanel, shell: StreamlitShell) -> PipelineOrchestrator:
    """One orchestrator per browser session; collaborators are refreshed every rerun."""
    orchestrator = st.session_state.get("orchestrator")
    if orchestrator is None:
        config_path = CONFIG_PATH if os.path.isfile(CONFIG_PATH) else None
        orchestrator = PipelineOrchestrator.from_config(
            config_path, renderer=panel, shell=shell, scheduler=blocking_scheduler
        )
        st.session_state["orchestrator"] = orchestrator
    orchestrator.renderer = panel
    orchestrator.shell = shell
    return orchestrator


def main():
    st.set_page_config(page_title="Daily Sales Forecasting", layout="wide")

    # -------------------------------
    # Title
    # -------------------------------
    st.markdown(
        "<h2 style='text-align:center; margin-bottom:0;'>Daily Sales Forecasting</h2>"
        "<p style='text-align:center;'>Predict the next 20 days of sales based on at "
        "least 40 days of historical data.</p>",
        unsafe_allow_html=True,
    )

    # -------------------------------
    # Input form
    # -------------------------------
    st.session_state.setdefault("bulk_input", "")
    for column, (label, sample) in zip(st.columns(len(SAMPLES)), SAMPLES.items()):
        if column.button(label):
            st.session_state["bulk_input"] = sample

    st.text_area(
        "Paste at least 40 comma-separated values.",
        key="bulk_input",
        height=130,
        placeholder="e.g., 1200,1300,1250,...",
    )
    loading = st.session_state.get("loading", False)
    submitted = st.button(
        "Calculating..." if loading else "Generate Forecast", disabled=loading, type="primary"
    )

    shell = StreamlitShell()
    panel = ForecastPanel()

    try:
        orchestrator = _get_orchestrator(panel, shell)
    except ConfigurationError as e:
        error_logger.log_error("Dashboard could not start", exception=e, severity="error")
        st.error(str(e))
        return
    panel.horizon = orchestrator.prediction_length

    if submitted:
        logger.info("Forecast submission triggered")
        st.session_state.pop("error", None)
        try:
            orchestrator.submit(st.session_state["bulk_input"])
        except SubmissionInProgressError as e:
            error_logger.log_error("Duplicate submission ignored", exception=e, severity="info")
            st.warning(str(e))
    else:
        # Reruns from other widgets redraw the last result and error
        if orchestrator.latest_series:
            panel.render(orchestrator.latest_series, orchestrator.latest_summary)
        if st.session_state.get("error"):
            st.error(st.session_state["error"])

    logger.info("Dashboard render complete.")


if __name__ == "__main__":
    main()
