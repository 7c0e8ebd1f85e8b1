"""Marketplace storage backends.

- SupabaseMarketplaceStore: hosted Postgres via supabase-py
- InMemoryMarketplaceStore: process-local fallback for demo mode and tests
"""

from .base import (
    DuplicateRecordError,
    MarketplaceStore,
    StoreError,
    default_role_record,
    utc_now_iso,
)
from .cloud import SupabaseMarketplaceStore, flatten_person
from .memory import InMemoryMarketplaceStore

__all__ = [
    "MarketplaceStore",
    "StoreError",
    "DuplicateRecordError",
    "default_role_record",
    "utc_now_iso",
    "SupabaseMarketplaceStore",
    "InMemoryMarketplaceStore",
    "flatten_person",
]
