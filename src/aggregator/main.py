"""CLI entry point for the market baseline aggregator.

Usage:
    python -m src.aggregator.main
    python -m src.aggregator.main --window-days 14 --dry-run

Exits 1 on missing Supabase credentials or when the window read fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from ..common.config import get_settings
from ..common.logging import setup_logging
from ..common.store import SupabaseStore
from .baselines import AggregateSummary, BaselineAggregator

logger = logging.getLogger(__name__)


def _print_summary(summary: AggregateSummary, dry_run: bool) -> None:
    logger.info("=== Aggregator summary%s ===", " (dry run)" if dry_run else "")
    logger.info("  Window start:  %s", summary.window_start.isoformat() if summary.window_start else "-")
    logger.info(
        "  Snapshots:     %d read, %d dropped",
        summary.observations_read, summary.observations_dropped,
    )
    logger.info("  Buckets:       %d", summary.buckets)
    if dry_run:
        for baseline in summary.baselines:
            logger.info("  %s", baseline.to_supabase_dict())
        return
    logger.info("  Baselines:     %d written", summary.baselines_written)
    if summary.baselines_failed:
        logger.warning("  Failed writes: %d", summary.baselines_failed)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Recompute market baselines from recent listing snapshots"
    )
    parser.add_argument(
        "--window-days", type=int, default=None,
        help="Trailing window in days (default: aggregator.window_days from settings)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Compute and log baselines without writing them",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.window_days is not None and args.window_days < 1:
        logger.error("Configuration error: --window-days must be at least 1")
        return 1

    try:
        loaded = get_settings()
        store = SupabaseStore.from_env(loaded.store)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 1

    config = loaded.aggregator.model_copy()
    if args.window_days is not None:
        config.window_days = args.window_days

    try:
        summary = BaselineAggregator(store, config).run(dry_run=args.dry_run)
    except Exception as e:
        logger.error("Aggregation aborted: %s", e)
        return 1

    _print_summary(summary, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
