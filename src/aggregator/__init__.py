"""Aggregator: per-market baselines from recent listing snapshots."""

from .baselines import (
    AggregateSummary,
    BaselineAggregator,
    avg_market_days,
    bucket_observations,
    compute_baseline,
)
from .stats import mean, median, span_days

__all__ = [
    "AggregateSummary",
    "BaselineAggregator",
    "avg_market_days",
    "bucket_observations",
    "compute_baseline",
    "mean",
    "median",
    "span_days",
]
