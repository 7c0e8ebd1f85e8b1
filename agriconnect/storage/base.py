"""
Marketplace storage protocol.

Records cross this boundary as plain dicts shaped like the backend rows.
Listing methods return rows enriched with their related profile data
(``farmer``, ``labourer``, ``job``) and newest first.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Protocol

# Table names (keep in sync with the Supabase schema)
PROFILES_TABLE = "profiles"
FARMERS_TABLE = "farmers"
LABOURERS_TABLE = "labourers"
JOB_POSTINGS_TABLE = "job_postings"
JOB_APPLICATIONS_TABLE = "job_applications"

ROLE_TABLES = {"farmer": FARMERS_TABLE, "labourer": LABOURERS_TABLE}


class StoreError(Exception):
    """Raised when the backing store rejects an operation."""


class DuplicateRecordError(StoreError):
    """Raised when an insert violates a uniqueness constraint."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def default_role_record(role: str, user_id: str) -> dict[str, Any]:
    """Initial role-specific row created at sign-up."""
    now = utc_now_iso()
    if role == "farmer":
        return {
            "id": user_id,
            "experience_years": 0,
            "verified": False,
            "rating": 0.0,
            "total_jobs_posted": 0,
            "created_at": now,
        }
    if role == "labourer":
        return {
            "id": user_id,
            "skills": [],
            "experience_years": 0,
            "availability": True,
            "rating": 0.0,
            "total_jobs_completed": 0,
            "created_at": now,
        }
    raise ValueError(f"Unknown role: {role}")


class MarketplaceStore(Protocol):
    """Protocol for marketplace persistence backends."""

    # Profiles
    async def upsert_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        ...

    async def upsert_role_record(self, role: str, record: dict[str, Any]) -> dict[str, Any]:
        ...

    async def get_profile(self, user_id: str) -> Optional[dict[str, Any]]:
        ...

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
        ...

    # Jobs
    async def insert_job(self, farmer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        ...

    async def get_job(self, job_id: str) -> Optional[dict[str, Any]]:
        ...

    async def list_jobs(
        self,
        status: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        """List jobs enriched with ``farmer``."""
        ...

    async def list_jobs_for_farmer(self, farmer_id: str) -> list[dict[str, Any]]:
        ...

    async def update_job_status(self, job_id: str, status: str) -> Optional[dict[str, Any]]:
        ...

    async def delete_job(self, job_id: str, farmer_id: str) -> None:
        ...

    # Applications
    async def insert_application(
        self, job_id: str, labourer_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        ...

    async def get_application(self, application_id: str) -> Optional[dict[str, Any]]:
        ...

    async def list_applications_for_job(self, job_id: str) -> list[dict[str, Any]]:
        """List a job's applications enriched with ``labourer``."""
        ...

    async def list_applications_for_labourer(self, labourer_id: str) -> list[dict[str, Any]]:
        """List a labourer's applications enriched with ``job`` and its ``farmer``."""
        ...

    async def update_application_status(
        self, application_id: str, status: str
    ) -> Optional[dict[str, Any]]:
        ...
