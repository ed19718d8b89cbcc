"""Null-aware summary statistics for noisy, irregular samples."""

from __future__ import annotations

import math
import statistics
from datetime import datetime
from typing import Iterable, Optional

SECONDS_PER_DAY = 86_400


def finite_values(values: Iterable[object]) -> list[float]:
    """Keep only real, finite numbers (drops None, NaN, inf, bools)."""
    return [
        v for v in values
        if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
    ]


def median(values: Iterable[object]) -> Optional[float]:
    """Median of the finite values; mean of the two middle values for even counts.

    Returns None for an empty input.
    """
    data = finite_values(values)
    if not data:
        return None
    return statistics.median(data)


def mean(values: Iterable[object]) -> Optional[float]:
    """Arithmetic mean of the finite values, None when there are none."""
    data = finite_values(values)
    if not data:
        return None
    return statistics.fmean(data)


def span_days(timestamps: Iterable[datetime]) -> float:
    """Days between the earliest and latest timestamp (0 for a single one)."""
    ordered = sorted(timestamps)
    if not ordered:
        return 0.0
    return (ordered[-1] - ordered[0]).total_seconds() / SECONDS_PER_DAY
