"""Supabase store: listings, observation snapshots and market baselines.

Every write is a single upsert or insert; the tables' own unique keys make
the upserts idempotent. Writes report success as a bool and log failures
so one bad row never stops a run. Reads raise.

Prerequisites:
    - Tables from config/schema.sql provisioned in the Supabase project
    - SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in .env

Usage:
    from src.common.store import SupabaseStore

    store = SupabaseStore.from_env()
    store.upsert_listing(listing)
    store.insert_observation(observation)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from .config import StoreSettings, get_settings, get_supabase_credentials
from .models import Listing, MarketBaseline, Observation

logger = logging.getLogger(__name__)

LISTING_CONFLICT_KEY = "listing_id"
BASELINE_CONFLICT_KEY = "zip,make,model,year"
WINDOW_SELECT = "listing_id, zip, adr, rating, trips, captured_at, listings ( make, model, year )"


class SupabaseStore:
    """Thin wrapper over the Supabase client for the pipeline's three tables."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        store_settings: Optional[StoreSettings] = None,
        client=None,
    ):
        self._url = supabase_url or ""
        self._key = supabase_key or ""
        self._settings = store_settings or get_settings().store
        self._client = client

    @classmethod
    def from_env(cls, store_settings: Optional[StoreSettings] = None) -> SupabaseStore:
        """Build a store from environment credentials.

        Raises:
            ValueError: If SUPABASE_URL or the service-role key is missing.
        """
        url, key = get_supabase_credentials()
        return cls(supabase_url=url, supabase_key=key, store_settings=store_settings)

    def _get_client(self):
        """Lazy-initialize Supabase client."""
        if self._client is not None:
            return self._client
        if not self._url or not self._key:
            raise ValueError(
                "SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY must be set in .env. "
                "See config/.env.example."
            )
        from supabase import create_client

        self._client = create_client(self._url, self._key)
        logger.info("Connected to Supabase: %s", self._url)
        return self._client

    # --- Collector writes ---

    def upsert_listing(self, listing: Listing) -> bool:
        """Insert or update a listing by its canonical id."""
        try:
            (
                self._get_client()
                .table(self._settings.listings_table)
                .upsert(listing.to_supabase_dict(), on_conflict=LISTING_CONFLICT_KEY)
                .execute()
            )
            return True
        except Exception as e:
            logger.error("Listing upsert failed for %s: %s", listing.listing_id, e)
            return False

    def insert_observation(self, observation: Observation) -> bool:
        """Append one observation snapshot."""
        try:
            (
                self._get_client()
                .table(self._settings.snapshots_table)
                .insert(observation.to_supabase_dict())
                .execute()
            )
            return True
        except Exception as e:
            logger.error("Snapshot insert failed for %s: %s", observation.listing_id, e)
            return False

    # --- Aggregator read/write ---

    def fetch_observations_since(self, since: datetime) -> list[dict]:
        """Read every snapshot captured strictly after `since`.

        Rows carry an embedded `listings` object with make, model and year.
        Pages through the table so the store's row cap never truncates the
        window. Any failed page raises; callers must not aggregate a
        partial window.
        """
        client = self._get_client()
        page_size = self._settings.page_size
        since_iso = since.isoformat()
        rows: list[dict] = []
        start = 0

        while True:
            result = (
                client.table(self._settings.snapshots_table)
                .select(WINDOW_SELECT)
                .gt("captured_at", since_iso)
                .order("captured_at")
                .order("id")
                .range(start, start + page_size - 1)
                .execute()
            )
            batch = result.data or []
            rows.extend(batch)
            logger.debug("Fetched %d snapshots (offset %d)", len(batch), start)
            if len(batch) < page_size:
                break
            start += page_size

        logger.info("Fetched %d snapshots captured after %s", len(rows), since_iso)
        return rows

    def upsert_baseline(self, baseline: MarketBaseline) -> bool:
        """Replace the baseline for one bucket key."""
        try:
            (
                self._get_client()
                .table(self._settings.baselines_table)
                .upsert(baseline.to_supabase_dict(), on_conflict=BASELINE_CONFLICT_KEY)
                .execute()
            )
            return True
        except Exception as e:
            logger.error("Baseline upsert failed for %s: %s", "|".join(map(str, baseline.key)), e)
            return False
