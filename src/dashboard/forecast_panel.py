# src/dashboard/forecast_panel.py

import streamlit as st
import plotly.graph_objects as go
from typing import Optional, Sequence

from src.dashboard.utils import (
    CHART_HEIGHT,
    HISTORICAL_COLOR,
    PREDICTED_COLOR,
    TICK_INTERVAL,
    format_currency,
    get_ui_logger,
)
from src.timeseries.series_merger import SeriesPoint, series_to_frame
from src.timeseries.summary import SummaryStats

# -------------------------------
# Logging configuration
# -------------------------------
logger = get_ui_logger(__name__)


# -------------------------------
# Chart + summary builders
# -------------------------------
def build_forecast_figure(series: Sequence[SeriesPoint], show_predicted: bool) -> go.Figure:
    """
    Build the sales trend chart.

    Args:
        series: Unified series to plot.
        show_predicted: Whether to draw the predicted trace.

    Returns:
        go.Figure: Line chart with "Historical Sales" and, when shown,
        "Predicted Sales" traces. Gaps are left where a point has no value.
    """
    df = series_to_frame(series)
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=df["date"],
        y=df["actual"],
        mode="lines+markers",
        name="Historical Sales",
        line=dict(color=HISTORICAL_COLOR, width=2),
        marker=dict(size=2),
    ))

    if show_predicted:
        fig.add_trace(go.Scatter(
            x=df["date"],
            y=df["predicted"],
            mode="lines+markers",
            name="Predicted Sales",
            line=dict(color=PREDICTED_COLOR, width=2),
            marker=dict(size=4),
        ))

    fig.update_layout(
        title="Sales Trend & Forecast",
        xaxis=dict(tickangle=-45, dtick=TICK_INTERVAL, type="category"),
        yaxis_title="Sales",
        template="plotly_white",
        height=CHART_HEIGHT,
    )
    return fig


def summary_cards(summary: SummaryStats) -> list[tuple[str, str]]:
    """Card titles and formatted values for the forecast summary."""
    return [
        ("Average Predicted Sales", format_currency(summary.average)),
        ("Highest Predicted Day", format_currency(summary.max)),
        ("Lowest Predicted Day", format_currency(summary.min)),
    ]


# -------------------------------
# Streamlit collaborators
# -------------------------------
class ForecastPanel:
    """
    Renders the unified series and summary into Streamlit placeholders.

    The first render of a submission has no summary and shows only the
    historical line; the second adds the predicted line and summary cards.
    """

    def __init__(self, horizon: int = 20):
        self.horizon = horizon
        self.chart_slot = st.empty()
        self.summary_slot = st.empty()

    def render(self, series: Sequence[SeriesPoint], summary: Optional[SummaryStats]) -> None:
        if not series:
            self.chart_slot.empty()
            self.summary_slot.empty()
            return

        fig = build_forecast_figure(series, show_predicted=summary is not None)
        self.chart_slot.plotly_chart(fig, use_container_width=True)

        if summary is None:
            self.summary_slot.empty()
            logger.info(f"Rendered historical-only chart ({len(series)} points)")
            return

        with self.summary_slot.container():
            st.subheader(f"{self.horizon}-Day Forecast Summary")
            for column, (title, value) in zip(st.columns(3), summary_cards(summary)):
                column.metric(title, value)
        logger.info(f"Rendered complete chart ({len(series)} points) with summary")


class StreamlitShell:
    """Loading and error display for the submission form."""

    def __init__(self):
        self.status_slot = st.empty()

    def set_loading(self, loading: bool) -> None:
        st.session_state["loading"] = loading
        if loading:
            self.status_slot.info("Calculating...")
        else:
            self.status_slot.empty()

    def report_error(self, message: str, error: Exception) -> None:
        logger.error(f"Submission failed: {error}")
        st.session_state["error"] = message
        st.error(message)
