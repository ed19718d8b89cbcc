"""Collector: marketplace search-results crawler.

Modules:
- parsers: pure title / price / meta text parsers
- selectors: ordered selector fallback chains
- throttle: session-wide request delay
- browser: Playwright session shared across targets
- targets: (region, query) target list loading
- scraper: per-target card extraction and persistence
- main: CLI entry point
"""

from .parsers import (
    ParsedMeta,
    ParsedTitle,
    canonical_listing_id,
    number_from_text,
    parse_meta,
    parse_price,
    parse_title,
    parse_trips,
    resolve_listing_url,
)
from .scraper import CollectSummary, SearchCollector, build_records, build_search_url
from .targets import Target, load_targets
from .throttle import RequestThrottle

__all__ = [
    "CollectSummary",
    "ParsedMeta",
    "ParsedTitle",
    "RequestThrottle",
    "SearchCollector",
    "Target",
    "build_records",
    "build_search_url",
    "canonical_listing_id",
    "load_targets",
    "number_from_text",
    "parse_meta",
    "parse_price",
    "parse_title",
    "parse_trips",
    "resolve_listing_url",
]
