# src/timeseries/date_aligner.py
"""
Calendar alignment for historical and forecast points.

Historical values are assumed to be one observation per day ending
yesterday relative to the anchor; forecast values continue day by day
after the last historical date.
"""

from datetime import date, datetime
from typing import Optional, Tuple, Union

import pandas as pd

DateLike = Union[date, datetime, pd.Timestamp]


def _normalize(day: DateLike) -> pd.Timestamp:
    return pd.Timestamp(day).normalize()


def _check_count(count: int) -> None:
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")


def align_historical(count: int, anchor: Optional[DateLike] = None) -> Tuple[date, ...]:
    """
    Dates for ``count`` historical points: ``anchor - count`` days through
    ``anchor - 1`` day inclusive.

    Args:
        count (int): Number of historical observations.
        anchor (DateLike, optional): Submission day. Defaults to today's local date.

    Returns:
        Tuple[date, ...]: Strictly increasing calendar dates.
    """
    _check_count(count)
    if count == 0:
        return ()
    anchor_ts = _normalize(anchor if anchor is not None else date.today())
    end = anchor_ts - pd.Timedelta(days=1)
    return tuple(ts.date() for ts in pd.date_range(end=end, periods=count, freq="D"))


def align_future(overlap_date: DateLike, count: int) -> Tuple[date, ...]:
    """
    Dates for ``count`` forecast points starting the day after ``overlap_date``.

    Args:
        overlap_date (DateLike): Last historical date (the boundary point).
        count (int): Forecast horizon.

    Returns:
        Tuple[date, ...]: Strictly increasing calendar dates.
    """
    _check_count(count)
    if count == 0:
        return ()
    start = _normalize(overlap_date) + pd.Timedelta(days=1)
    return tuple(ts.date() for ts in pd.date_range(start=start, periods=count, freq="D"))


def format_date_label(day: DateLike, fmt: Optional[str] = None) -> str:
    """
    Short month/day label such as ``"Oct 5"``.

    Args:
        day (DateLike): Date to format.
        fmt (str, optional): strftime pattern overriding the default label.
    """
    ts = pd.Timestamp(day)
    if fmt:
        return ts.strftime(fmt)
    return f"{ts.strftime('%b')} {ts.day}"
