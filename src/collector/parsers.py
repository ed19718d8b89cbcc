"""Pure text parsers for search-result cards.

Each function maps raw card text to a nullable result and never touches
the browser or the store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

# "<4-digit year> <make> <model> [trim...]"
_TITLE_RE = re.compile(r"^\s*(\d{4})\s+([A-Za-z][A-Za-z\-]*)\s+([\w\-]+)\s*(.*)$", re.DOTALL)
_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_TRIPS_RE = re.compile(r"(\d[\d,]*)\s*trips", re.IGNORECASE)


@dataclass
class ParsedTitle:
    """Vehicle identity parsed from a card title. All fields null on a miss."""

    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.year and self.make and self.model)


@dataclass
class ParsedMeta:
    """Rating and trip count from the combined meta text."""

    rating: Optional[float] = None
    trips: Optional[int] = None


def parse_title(text: Optional[str]) -> ParsedTitle:
    """Parse a title like "2021 Toyota Camry SE".

    Titles that do not start with a 4-digit year yield all-null fields.
    """
    m = _TITLE_RE.match(text or "")
    if not m:
        return ParsedTitle()
    trim = " ".join(m.group(4).split())
    return ParsedTitle(
        year=int(m.group(1)),
        make=m.group(2),
        model=m.group(3),
        trim=trim or None,
    )


def number_from_text(text: Optional[str]) -> Optional[float]:
    """Return the first numeric token in `text` (commas stripped), else None.

    >>> number_from_text("$1,234/day")
    1234.0
    """
    if not text:
        return None
    m = _NUMBER_RE.search(str(text).replace(",", ""))
    return float(m.group(1)) if m else None


def parse_trips(text: Optional[str]) -> Optional[int]:
    """Trip count from a "<N> trips" phrase, thousands separators allowed."""
    m = _TRIPS_RE.search(text or "")
    return int(m.group(1).replace(",", "")) if m else None


def parse_meta(text: Optional[str]) -> ParsedMeta:
    """Parse meta text such as "4.9 · 132 trips".

    The rating is the first number outside the trips phrase, so a card
    showing only "12 trips" has no rating.
    """
    if not text:
        return ParsedMeta()
    trips = parse_trips(text)
    return ParsedMeta(
        rating=number_from_text(_TRIPS_RE.sub(" ", text)),
        trips=trips,
    )


def parse_price(text: Optional[str]) -> Optional[float]:
    """Daily rate from price text like "$85/day"."""
    return number_from_text(text)


def resolve_listing_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Make a card href absolute. Returns None for empty hrefs."""
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith("http"):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)


def canonical_listing_id(url: str) -> str:
    """Canonical listing id: the URL without query string or fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
