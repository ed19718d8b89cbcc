"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class CollectorSettings(BaseModel):
    """Settings for the search-results collector."""
    base_url: str = "https://turo.com"
    search_path: str = "/us/en/search"
    country: str = "US"
    items_per_page: int = Field(default=200, ge=1)
    navigation_timeout_ms: int = 120_000
    settle_delay_ms: int = 3_000
    # Politeness delays
    card_delay_seconds: float = Field(default=2.5, ge=0)
    target_delay_seconds: float = Field(default=10.0, ge=0)
    request_delay_ms: int = Field(default=1_200, ge=0)
    headless: bool = True
    rotate_user_agent: bool = False
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0.0.0 Safari/537.36"
    )
    targets_path: str = str(CONFIG_DIR / "targets.json")

    @property
    def targets_abs_path(self) -> Path:
        """Resolve targets path relative to project root."""
        p = Path(self.targets_path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


class AggregatorSettings(BaseModel):
    """Settings for the baseline aggregator."""
    window_days: int = Field(default=30, ge=1)


class StoreSettings(BaseModel):
    """Table names and read paging for the Supabase store."""
    listings_table: str = "listings"
    snapshots_table: str = "listing_snapshots"
    baselines_table: str = "market_baselines"
    page_size: int = Field(default=1000, ge=1)


class Settings(BaseModel):
    """Top-level application settings."""
    collector: CollectorSettings = Field(default_factory=CollectorSettings)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables override values from the file and go through
        the same validation.

        Raises:
            ValueError: If a file value or an override fails validation.
        """
        settings_path = path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        _merge_env_overrides(data)
        return cls(**data)


# (section, field, environment variable)
_ENV_OVERRIDES = [
    ("collector", "request_delay_ms", "COLLECTOR_REQUEST_DELAY_MS"),
    ("collector", "card_delay_seconds", "COLLECTOR_CARD_DELAY_SECONDS"),
    ("collector", "target_delay_seconds", "COLLECTOR_TARGET_DELAY_SECONDS"),
    ("collector", "headless", "COLLECTOR_HEADLESS"),
    ("aggregator", "window_days", "AGGREGATOR_WINDOW_DAYS"),
]


def _merge_env_overrides(data: dict) -> None:
    for section, field, env_name in _ENV_OVERRIDES:
        if value := os.getenv(env_name):
            if data.get(section) is None:
                data[section] = {}
            data[section][field] = value.strip()


def get_supabase_credentials() -> tuple[str, str]:
    """Get the Supabase endpoint and service-role key from environment."""
    url = os.getenv("SUPABASE_URL", "")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "") or os.getenv("SUPABASE_SERVICE_KEY", "")
    if not url or not key:
        raise ValueError(
            "SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY must be set in .env. "
            "See config/.env.example."
        )
    return url, key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Shared settings instance, loaded on first use."""
    return Settings.load()
