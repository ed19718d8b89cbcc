"""CLI entry point for the listing collector.

Usage:
    python -m src.collector.main
    python -m src.collector.main --targets config/targets.json --headed

Exits 1 on configuration errors (missing Supabase credentials, unreadable
targets file) or when the browser cannot be launched.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from ..common.config import CollectorSettings, get_settings
from ..common.logging import setup_logging
from ..common.store import SupabaseStore
from .browser import BrowserSession
from .scraper import CollectSummary, SearchCollector
from .targets import Target, load_targets

logger = logging.getLogger(__name__)


async def run(
    targets: list[Target],
    store: SupabaseStore,
    config: CollectorSettings,
) -> CollectSummary:
    """Main execution flow: one browser session for the whole target list."""
    if not targets:
        logger.info("No targets to collect")
        return CollectSummary()

    async with BrowserSession(config) as session:
        collector = SearchCollector(session, store, config)
        return await collector.run(targets)


def _print_summary(summary: CollectSummary) -> None:
    logger.info("=== Collector summary ===")
    logger.info("  Targets:       %d (%d failed)", summary.targets_total, summary.targets_failed)
    logger.info(
        "  Cards:         %d seen, %d skipped (no URL), %d unreadable",
        summary.cards_seen, summary.cards_skipped, summary.cards_failed,
    )
    logger.info("  Listings:      %d upserted", summary.listings_upserted)
    logger.info("  Observations:  %d inserted", summary.observations_inserted)
    if summary.write_failures:
        logger.warning("  Write failures: %d", summary.write_failures)
    for error in summary.errors:
        logger.warning("  Target error: %s", error)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Collect rental listing observations from marketplace search results"
    )
    parser.add_argument(
        "--targets", type=str, default=None,
        help="Path to targets JSON/YAML (default: collector.targets_path from settings)",
    )
    parser.add_argument(
        "--headed", action="store_true",
        help="Show the browser window (default: headless)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        loaded = get_settings()
        store = SupabaseStore.from_env(loaded.store)
        config = loaded.collector.model_copy()
        if args.headed:
            config.headless = False
        targets_path = Path(args.targets) if args.targets else config.targets_abs_path
        targets = load_targets(targets_path)
    except (ValueError, OSError) as e:
        logger.error("Configuration error: %s", e)
        return 1

    try:
        summary = asyncio.run(run(targets, store, config))
    except Exception as e:
        logger.error("Collector aborted: %s", e)
        return 1

    _print_summary(summary)
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
