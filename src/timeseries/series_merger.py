# src/timeseries/series_merger.py
"""
Build the unified chart series from historical and predicted segments.

The last historical point also carries ``predicted`` equal to its own
actual value, so the forecast line starts where the historical line ends.
Every call returns a new immutable tuple.
"""

from dataclasses import dataclass
import datetime
from typing import Optional, Sequence, Tuple

import pandas as pd

from src.timeseries.date_aligner import format_date_label


@dataclass(frozen=True)
class SeriesPoint:
    day: datetime.date
    date: str
    actual: Optional[float] = None
    predicted: Optional[float] = None

    def __post_init__(self):
        if self.actual is None and self.predicted is None:
            raise ValueError(f"Series point {self.date} has neither actual nor predicted value")

    @property
    def is_boundary(self) -> bool:
        return self.actual is not None and self.predicted is not None


UnifiedSeries = Tuple[SeriesPoint, ...]


def _check_lengths(values: Sequence[float], dates: Sequence[datetime.date], segment: str) -> None:
    if len(values) != len(dates):
        raise ValueError(
            f"{segment} segment has {len(values)} values but {len(dates)} dates"
        )


def _check_increasing(dates: Sequence[datetime.date]) -> None:
    for prev, curr in zip(dates, dates[1:]):
        if curr <= prev:
            raise ValueError(f"Dates must be strictly increasing: {prev} then {curr}")


def historical_series(
    historical_values: Sequence[float],
    historical_dates: Sequence[datetime.date],
    label_format: Optional[str] = None,
) -> UnifiedSeries:
    """Historical-only series, one point per observation, no predicted values."""
    _check_lengths(historical_values, historical_dates, "Historical")
    _check_increasing(historical_dates)
    return tuple(
        SeriesPoint(day=d, date=format_date_label(d, label_format), actual=float(v))
        for v, d in zip(historical_values, historical_dates)
    )


def merge_series(
    historical_values: Sequence[float],
    historical_dates: Sequence[datetime.date],
    predicted_values: Sequence[float],
    future_dates: Sequence[datetime.date],
    label_format: Optional[str] = None,
) -> UnifiedSeries:
    """
    Merge historical and predicted segments into one chronological series.

    Args:
        historical_values: Observed values, oldest first.
        historical_dates: One date per observed value.
        predicted_values: Forecast values, one per future day.
        future_dates: One date per forecast value, after the last historical date.
        label_format: Optional strftime pattern for point labels.

    Returns:
        UnifiedSeries of length ``len(historical_values) + len(predicted_values)``
        where only the last historical point has both fields set.

    Raises:
        ValueError: On empty history, mismatched lengths or non-increasing dates.
    """
    if len(historical_values) == 0:
        raise ValueError("Cannot merge a forecast onto an empty history")
    _check_lengths(predicted_values, future_dates, "Predicted")

    points = list(historical_series(historical_values, historical_dates, label_format))
    if future_dates and future_dates[0] <= historical_dates[-1]:
        raise ValueError(
            f"First future date {future_dates[0]} does not follow last historical date "
            f"{historical_dates[-1]}"
        )
    _check_increasing(future_dates)

    boundary = points[-1]
    points[-1] = SeriesPoint(
        day=boundary.day,
        date=boundary.date,
        actual=boundary.actual,
        predicted=boundary.actual,
    )

    points.extend(
        SeriesPoint(day=d, date=format_date_label(d, label_format), predicted=float(v))
        for v, d in zip(predicted_values, future_dates)
    )
    return tuple(points)


def series_to_frame(series: Sequence[SeriesPoint]) -> pd.DataFrame:
    """Tabular view of a series with ``day``, ``date``, ``actual``, ``predicted`` columns."""
    return pd.DataFrame(
        {
            "day": pd.to_datetime([p.day for p in series]),
            "date": [p.date for p in series],
            "actual": pd.Series([p.actual for p in series], dtype="float64"),
            "predicted": pd.Series([p.predicted for p in series], dtype="float64"),
        },
        columns=["day", "date", "actual", "predicted"],
    )
