"""API routes."""

from .advisory import crops_router, location_router, market_router, tools_router
from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .jobs import applications_router
from .jobs import router as jobs_router

__all__ = [
    "auth_router",
    "jobs_router",
    "applications_router",
    "crops_router",
    "tools_router",
    "market_router",
    "location_router",
    "dashboard_router",
]
