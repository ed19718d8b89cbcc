"""Market baseline aggregation.

Groups the trailing window of listing snapshots into
(region, make, model, year) buckets and writes one baseline per bucket:

- adr_median:      median of non-null daily rates
- rating_avg:      mean of non-null ratings
- trips_median:    median of non-null trip counts
- avg_market_days: mean per-listing span between first and last sighting
- sample_size:     number of snapshots in the bucket

Snapshots with a null rate/rating/trips still count toward sample_size.
Buckets that drop out of the window keep their last baseline; nothing is
deleted.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from pydantic import ValidationError

from ..common.config import AggregatorSettings
from ..common.models import MarketBaseline, WindowObservation
from ..common.store import SupabaseStore
from .stats import mean, median, span_days

logger = logging.getLogger(__name__)

BucketKey = tuple[str, str, str, int]


@dataclass
class AggregateSummary:
    """Counters reported at the end of an aggregator run."""

    window_start: Optional[datetime] = None
    observations_read: int = 0
    observations_dropped: int = 0
    buckets: int = 0
    baselines_written: int = 0
    baselines_failed: int = 0
    baselines: list[MarketBaseline] = field(default_factory=list)


def bucket_key(obs: WindowObservation) -> Optional[BucketKey]:
    """Bucket key for a snapshot, or None when any key field is missing."""
    if not (obs.region and obs.make and obs.model and obs.year):
        return None
    return (obs.region, obs.make, obs.model, obs.year)


def bucket_observations(
    observations: Iterable[WindowObservation],
) -> tuple[dict[BucketKey, list[WindowObservation]], int]:
    """Group snapshots by bucket key.

    Returns:
        (buckets, dropped) where dropped counts snapshots lacking
        region, make, model or year.
    """
    buckets: dict[BucketKey, list[WindowObservation]] = defaultdict(list)
    dropped = 0
    for obs in observations:
        key = bucket_key(obs)
        if key is None:
            dropped += 1
            continue
        buckets[key].append(obs)
    return dict(buckets), dropped


def avg_market_days(observations: Iterable[WindowObservation]) -> Optional[float]:
    """Average first-to-last sighting span in days across distinct listings."""
    sightings: dict[str, list[datetime]] = defaultdict(list)
    for obs in observations:
        sightings[obs.listing_id].append(obs.captured_at)
    if not sightings:
        return None
    return mean(span_days(ts) for ts in sightings.values())


def compute_baseline(key: BucketKey, observations: list[WindowObservation]) -> MarketBaseline:
    """Summary statistics for one bucket."""
    region, make, model, year = key
    return MarketBaseline(
        region=region,
        make=make,
        model=model,
        year=year,
        adr_median=median(o.adr for o in observations),
        rating_avg=mean(o.rating for o in observations),
        trips_median=median(o.trips for o in observations),
        avg_market_days=avg_market_days(observations),
        sample_size=len(observations),
    )


def parse_rows(rows: Iterable[dict]) -> tuple[list[WindowObservation], int]:
    """Validate raw store rows. Malformed rows are skipped and counted."""
    parsed: list[WindowObservation] = []
    skipped = 0
    for row in rows:
        try:
            parsed.append(WindowObservation.from_row(row))
        except (KeyError, ValidationError) as e:
            skipped += 1
            logger.debug("Skipping malformed snapshot row %r: %s", row, e)
    return parsed, skipped


class BaselineAggregator:
    """Recomputes market baselines from the trailing observation window.

    Usage:
        aggregator = BaselineAggregator(SupabaseStore.from_env())
        summary = aggregator.run()
    """

    def __init__(
        self,
        store: SupabaseStore,
        config: Optional[AggregatorSettings] = None,
    ) -> None:
        self.store = store
        self.config = config or AggregatorSettings()

    def window_start(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=self.config.window_days)

    def run(self, now: Optional[datetime] = None, dry_run: bool = False) -> AggregateSummary:
        """Read the window, compute every bucket, upsert each baseline.

        A failed read raises; no partial window is ever aggregated. A failed
        bucket write is logged and the remaining buckets still run.
        """
        since = self.window_start(now)
        summary = AggregateSummary(window_start=since)

        rows = self.store.fetch_observations_since(since)
        summary.observations_read = len(rows)

        observations, malformed = parse_rows(rows)
        buckets, incomplete = bucket_observations(observations)
        summary.observations_dropped = malformed + incomplete
        summary.buckets = len(buckets)

        logger.info(
            "Aggregating %d snapshots into %d buckets (%d dropped)",
            len(rows), len(buckets), summary.observations_dropped,
        )

        for key, bucket in buckets.items():
            baseline = compute_baseline(key, bucket)
            summary.baselines.append(baseline)
            logger.debug(
                "%s: adr_median=%s rating_avg=%s trips_median=%s market_days=%s n=%d",
                "|".join(map(str, key)), baseline.adr_median, baseline.rating_avg,
                baseline.trips_median, baseline.avg_market_days, baseline.sample_size,
            )

            if dry_run:
                continue
            if self.store.upsert_baseline(baseline):
                summary.baselines_written += 1
            else:
                summary.baselines_failed += 1

        logger.info("Aggregation complete.")
        return summary
