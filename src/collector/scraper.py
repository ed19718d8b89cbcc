"""Rental marketplace search-results collector.

Visits one search page per (region, query) target, reads every vehicle
card, and persists a Listing upsert plus an Observation insert per card.

Key challenges:
- Results are rendered client-side, so pages are loaded in a real browser
  and given a fixed settle delay
- Card markup changes without notice; every field is read through an
  ordered selector fallback chain
- The site throttles aggressive clients; every request is delayed by the
  session throttle and every card/target is followed by a fixed pause

Persistence happens per card, so a failed target never loses the cards
already stored.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote, urlencode

from ..common.config import CollectorSettings
from ..common.models import Listing, Observation
from ..common.store import SupabaseStore
from .parsers import (
    canonical_listing_id,
    parse_meta,
    parse_price,
    parse_title,
    resolve_listing_url,
)
from .selectors import (
    CARD_SELECTORS,
    LINK_SELECTORS,
    META_SELECTORS,
    PRICE_SELECTORS,
    TITLE_SELECTORS,
    query_all_first,
    query_first,
    text_first,
)
from .targets import Target

logger = logging.getLogger(__name__)


@dataclass
class CardText:
    """Raw text read from one result card."""

    url: str
    title: str = ""
    price: str = ""
    meta: str = ""


@dataclass
class CollectSummary:
    """Counters reported at the end of a collector run."""

    targets_total: int = 0
    targets_failed: int = 0
    cards_seen: int = 0
    cards_skipped: int = 0
    cards_failed: int = 0
    listings_upserted: int = 0
    observations_inserted: int = 0
    write_failures: int = 0
    errors: list[str] = field(default_factory=list)


def build_search_url(target: Target, config: CollectorSettings) -> str:
    """Search-results URL for one target with a capped page size."""
    params = {
        "country": config.country,
        "itemsPerPage": config.items_per_page,
        "location": target.region,
        "q": target.query,
    }
    base = config.base_url.rstrip("/") + config.search_path
    return f"{base}?{urlencode(params, quote_via=quote)}"


def build_records(card: CardText, region: str) -> tuple[Listing, Observation]:
    """Turn raw card text into the Listing and Observation rows to persist."""
    title = parse_title(card.title)
    meta = parse_meta(card.meta)
    listing_id = canonical_listing_id(card.url)
    if not title.is_complete:
        logger.debug("Unparsed title %r for %s", card.title, listing_id)

    listing = Listing(
        listing_id=listing_id,
        url=card.url,
        make=title.make,
        model=title.model,
        trim=title.trim,
        year=title.year,
    )
    observation = Observation(
        listing_id=listing_id,
        region=region,
        adr=parse_price(card.price),
        rating=meta.rating,
        trips=meta.trips,
        min_days=None,
    )
    return listing, observation


class SearchCollector:
    """Collects listing observations from search-result pages.

    Usage:
        async with BrowserSession(config) as session:
            collector = SearchCollector(session, store, config)
            summary = await collector.run(targets)
    """

    def __init__(
        self,
        session: Any,
        store: SupabaseStore,
        config: CollectorSettings,
    ) -> None:
        self.session = session
        self.store = store
        self.config = config

    async def run(self, targets: list[Target]) -> CollectSummary:
        """Visit each target in order. One failed target never stops the run."""
        summary = CollectSummary(targets_total=len(targets))

        for i, target in enumerate(targets):
            logger.info("Collecting %s %r (%d/%d)", target.region, target.query, i + 1, len(targets))
            try:
                await self.collect_target(target, summary)
            except Exception as e:
                summary.targets_failed += 1
                summary.errors.append(f"{target.region} {target.query}: {e}")
                logger.error("Error on %s %r: %s", target.region, target.query, e)

            if i < len(targets) - 1:
                await asyncio.sleep(self.config.target_delay_seconds)

        logger.info(
            "Collection complete: %d/%d targets ok, %d observations",
            summary.targets_total - summary.targets_failed,
            summary.targets_total,
            summary.observations_inserted,
        )
        return summary

    async def collect_target(self, target: Target, summary: CollectSummary) -> int:
        """Scrape one search page. Returns the number of observations stored."""
        url = build_search_url(target, self.config)
        logger.info("Visiting %s", url)
        await self.session.goto(url)

        cards = await query_all_first(self.session.page, CARD_SELECTORS)
        logger.info("Found cards: %d", len(cards))

        stored = 0
        for card in cards:
            summary.cards_seen += 1
            try:
                card_text = await self._read_card(card)
            except Exception as e:
                summary.cards_failed += 1
                logger.warning("Failed to read card: %s", e)
                continue

            if card_text is None:
                summary.cards_skipped += 1
                continue

            if self._persist(card_text, target.region, summary):
                stored += 1

            await asyncio.sleep(self.config.card_delay_seconds)

        return stored

    async def _read_card(self, card: Any) -> Optional[CardText]:
        """Read URL and raw text from one card. None when no URL resolves."""
        href = await card.get_attribute("href")
        if not href:
            link = await query_first(card, LINK_SELECTORS)
            href = await link.get_attribute("href") if link else None

        url = resolve_listing_url(href, self.config.base_url)
        if not url:
            logger.debug("Card without listing URL, skipping")
            return None

        return CardText(
            url=url,
            title=await text_first(card, TITLE_SELECTORS),
            price=await text_first(card, PRICE_SELECTORS),
            meta=await text_first(card, META_SELECTORS),
        )

    def _persist(self, card: CardText, region: str, summary: CollectSummary) -> bool:
        """Upsert the listing, then append its observation."""
        listing, observation = build_records(card, region)

        if not self.store.upsert_listing(listing):
            summary.write_failures += 1
            return False
        summary.listings_upserted += 1

        if not self.store.insert_observation(observation):
            summary.write_failures += 1
            return False
        summary.observations_inserted += 1

        logger.debug(
            "Stored %s: %s %s %s adr=%s rating=%s trips=%s",
            listing.listing_id, listing.year, listing.make, listing.model,
            observation.adr, observation.rating, observation.trips,
        )
        return True
