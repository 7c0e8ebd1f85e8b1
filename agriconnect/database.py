"""Backend wiring: Supabase client, store and service dependencies.

When Supabase is not configured every dependency resolves to a process-wide
in-memory fallback so the API runs in demo mode.
"""

from typing import Annotated, Any

from fastapi import Depends

from supabase import Client, create_client

from .config import Settings, get_settings
from .logging_config import get_logger
from .services import (
    AuthService,
    CropService,
    DemoIdentityProvider,
    GovernmentApiService,
    JobService,
    LocationService,
    SupabaseIdentityProvider,
    ToolService,
)
from .services.auth_service import IdentityProvider
from .storage import InMemoryMarketplaceStore, MarketplaceStore, SupabaseMarketplaceStore

logger = get_logger("agriconnect.database")

_supabase_client: Client | None = None
_demo_store: InMemoryMarketplaceStore | None = None
_demo_identity: DemoIdentityProvider | None = None
_demo_tool_usage: list[dict[str, Any]] = []
_warned_demo = False


def get_supabase_client(settings: Settings | None = None) -> Client | None:
    """Get cached Supabase client, or None in demo mode."""
    global _supabase_client, _warned_demo
    if settings is None:
        settings = get_settings()
    if not settings.supabase_configured:
        if not _warned_demo:
            logger.warning("Supabase environment variables not found. Using demo mode.")
            _warned_demo = True
        return None
    if _supabase_client is None:
        _supabase_client = create_client(settings.supabase_url, settings.supabase_table_key)
    return _supabase_client


def get_db(settings: Annotated[Settings, Depends(get_settings)]) -> Client | None:
    """FastAPI dependency for the Supabase client (None in demo mode)."""
    return get_supabase_client(settings)


def get_store(settings: Annotated[Settings, Depends(get_settings)]) -> MarketplaceStore:
    """FastAPI dependency for the marketplace store."""
    global _demo_store
    client = get_supabase_client(settings)
    if client is not None:
        return SupabaseMarketplaceStore(client)
    if _demo_store is None:
        _demo_store = InMemoryMarketplaceStore()
    return _demo_store


def get_identity(settings: Annotated[Settings, Depends(get_settings)]) -> IdentityProvider:
    """FastAPI dependency for the identity provider."""
    global _demo_identity
    if settings.supabase_configured:
        return SupabaseIdentityProvider(settings)
    if _demo_identity is None:
        _demo_identity = DemoIdentityProvider()
    return _demo_identity


def reset_demo_state() -> None:
    """Drop all demo-mode data."""
    global _demo_store, _demo_identity
    _demo_store = None
    _demo_identity = None
    _demo_tool_usage.clear()


# Type aliases for dependency injection
Database = Annotated[Client | None, Depends(get_db)]
Store = Annotated[MarketplaceStore, Depends(get_store)]
Identity = Annotated[IdentityProvider, Depends(get_identity)]


def get_auth_service(store: Store, identity: Identity) -> AuthService:
    return AuthService(identity, store)


def get_job_service(store: Store) -> JobService:
    return JobService(store)


def get_crop_service(db: Database) -> CropService:
    return CropService(db)


def get_tool_service(db: Database) -> ToolService:
    return ToolService(db, usage_log=_demo_tool_usage)


def get_location_service(
    store: Store, settings: Annotated[Settings, Depends(get_settings)]
) -> LocationService:
    return LocationService(store, settings)


def get_government_service() -> GovernmentApiService:
    return GovernmentApiService()


AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
Jobs = Annotated[JobService, Depends(get_job_service)]
Crops = Annotated[CropService, Depends(get_crop_service)]
Tools = Annotated[ToolService, Depends(get_tool_service)]
Locations = Annotated[LocationService, Depends(get_location_service)]
Market = Annotated[GovernmentApiService, Depends(get_government_service)]
