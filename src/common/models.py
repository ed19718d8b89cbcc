"""Shared Pydantic data models for the rental market pipeline.

These models define the row contracts between the collector, the
aggregator and the Supabase tables they share.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# === Collector rows ===

class Listing(BaseModel):
    """A rental unit, keyed by its canonical URL. Maps to `listings`."""
    listing_id: str
    url: str
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    year: Optional[int] = None

    def to_supabase_dict(self) -> dict:
        return self.model_dump()


class Observation(BaseModel):
    """One point-in-time reading of a listing. Maps to `listing_snapshots`."""
    listing_id: str
    region: str
    adr: Optional[float] = None
    rating: Optional[float] = None
    trips: Optional[int] = None
    min_days: Optional[int] = None
    captured_at: datetime = Field(default_factory=_utcnow)

    def to_supabase_dict(self) -> dict:
        return {
            "listing_id": self.listing_id,
            "zip": self.region,
            "adr": self.adr,
            "rating": self.rating,
            "trips": self.trips,
            "min_days": self.min_days,
            "captured_at": self.captured_at.isoformat(),
        }


# === Aggregator rows ===

class WindowObservation(BaseModel):
    """An observation read back for aggregation, joined to its listing."""
    listing_id: str
    region: Optional[str] = None
    adr: Optional[float] = None
    rating: Optional[float] = None
    trips: Optional[float] = None
    captured_at: datetime
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict) -> WindowObservation:
        """Build from a `listing_snapshots` row with embedded `listings`."""
        listing = row.get("listings") or {}
        # PostgREST returns a list for to-many embeds
        if isinstance(listing, list):
            listing = listing[0] if listing else {}
        region = row.get("zip")
        return cls(
            listing_id=row["listing_id"],
            region=str(region) if region is not None else None,
            adr=row.get("adr"),
            rating=row.get("rating"),
            trips=row.get("trips"),
            captured_at=row["captured_at"],
            make=listing.get("make"),
            model=listing.get("model"),
            year=listing.get("year"),
        )


class MarketBaseline(BaseModel):
    """Summary statistics for one (region, make, model, year) bucket.

    Maps to `market_baselines`, unique on (zip, make, model, year).
    """
    region: str
    make: str
    model: str
    year: int
    adr_median: Optional[float] = None
    rating_avg: Optional[float] = None
    trips_median: Optional[float] = None
    avg_market_days: Optional[float] = None
    sample_size: int = Field(ge=0)

    @property
    def key(self) -> tuple[str, str, str, int]:
        return (self.region, self.make, self.model, self.year)

    def to_supabase_dict(self) -> dict:
        data = self.model_dump(exclude={"region"})
        data["zip"] = self.region
        return data
