# Common utilities and shared modules
"""
Shared components used by the collector and the aggregator:
- Data models (Pydantic row schemas)
- Supabase store
- Logging configuration
- Project configuration
"""

from .config import get_settings, PROJECT_ROOT, CONFIG_DIR, get_supabase_credentials
from .logging import setup_logging
from .models import Listing, MarketBaseline, Observation, WindowObservation
from .store import SupabaseStore

__all__ = [
    "get_settings",
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "get_supabase_credentials",
    "setup_logging",
    "Listing",
    "MarketBaseline",
    "Observation",
    "WindowObservation",
    "SupabaseStore",
]
