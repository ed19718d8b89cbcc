"""Selector fallback chains for search-result cards.

Each chain is an ordered list of CSS selectors. The first selector that
yields a non-empty result wins; later entries only run when earlier ones
miss. Current markup first, older/generic markup after.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)

# Current: [data-test="vehicle-card"]  |  Generic: any listing anchor
CARD_SELECTORS: list[str] = [
    '[data-test="vehicle-card"]',
    'a[href*="/car-rental/"]',
]

# Nested anchor used when the card itself carries no href
LINK_SELECTORS: list[str] = [
    'a[href*="/car-rental/"]',
]

TITLE_SELECTORS: list[str] = [
    '[data-test="vehicle-card-title"]',
    "h3",
    '[class*="title"]',
]

PRICE_SELECTORS: list[str] = [
    '[data-test="vehicle-card-price"]',
    '[class*="price"]',
]

META_SELECTORS: list[str] = [
    '[data-test="vehicle-card-meta"]',
    '[class*="rating"]',
    '[class*="trips"]',
]


async def query_all_first(root: Any, selectors: Sequence[str]) -> list:
    """Return the elements of the first selector that matches anything.

    Args:
        root: A Playwright Page or ElementHandle.
        selectors: Ordered selector chain.
    """
    for selector in selectors:
        elements = await root.query_selector_all(selector)
        if elements:
            logger.debug("Selector %s matched %d elements", selector, len(elements))
            return elements
    return []


async def query_first(root: Any, selectors: Sequence[str]) -> Optional[Any]:
    """Return the first element matched by the selector chain, or None."""
    for selector in selectors:
        element = await root.query_selector(selector)
        if element is not None:
            return element
    return None


async def text_first(root: Any, selectors: Sequence[str]) -> str:
    """Text content of the first non-empty match in the chain, else ""."""
    for selector in selectors:
        element = await root.query_selector(selector)
        if element is None:
            continue
        text = (await element.text_content() or "").strip()
        if text:
            return text
    return ""
