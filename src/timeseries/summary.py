"""Summary aggregates over the predicted segment."""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Sequence

import numpy as np


@dataclass(frozen=True)
class SummaryStats:
    average: int
    max: float
    min: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _mean(values: np.ndarray) -> float:
    with np.errstate(over="ignore"):
        mean = float(values.sum()) / values.size
    if not math.isfinite(mean):
        # The sum of large finite values overflows; average on a reduced scale instead
        scale = float(np.abs(values).max())
        mean = float(np.mean(values / scale)) * scale
    return mean


def summarize(predicted: Sequence[float]) -> SummaryStats:
    """
    Average (rounded), max and min of a predicted sequence.

    Raises:
        ValueError: If ``predicted`` is empty or holds non-finite values.
    """
    values = np.asarray(predicted, dtype=float)
    if values.size == 0:
        raise ValueError("Cannot summarize an empty prediction")
    if not np.isfinite(values).all():
        raise ValueError("Cannot summarize a prediction with non-finite values")

    return SummaryStats(
        average=round_half_up(_mean(values)),
        max=float(values.max()),
        min=float(values.min()),
    )
