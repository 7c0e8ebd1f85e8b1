"""
Supabase-backed marketplace storage.

Embedded selects pull the related farmer/labourer row together with its
profile; the nested ``profile`` object is flattened into its parent so
callers see one merged record per person.
"""

from typing import Any, Optional

from supabase import Client

from .base import (
    DuplicateRecordError,
    JOB_APPLICATIONS_TABLE,
    JOB_POSTINGS_TABLE,
    PROFILES_TABLE,
    ROLE_TABLES,
    StoreError,
)

JOB_WITH_FARMER_SELECT = "*, farmer:farmers!inner(*, profile:profiles!inner(*))"
APPLICATION_WITH_LABOURER_SELECT = "*, labourer:labourers!inner(*, profile:profiles!inner(*))"
APPLICATION_WITH_JOB_SELECT = (
    "*, job:job_postings!inner(*, farmer:farmers!inner(*, profile:profiles!inner(*)))"
)


def flatten_person(record: dict | None) -> dict | None:
    """Merge an embedded ``profile`` into its role row."""
    if not record:
        return record
    merged = {k: v for k, v in record.items() if k != "profile"}
    merged.update(record.get("profile") or {})
    return merged


def _first(result) -> Optional[dict]:
    return result.data[0] if result.data else None


def _is_duplicate(error: Exception) -> bool:
    text = str(error).lower()
    return "duplicate" in text or "unique" in text or "23505" in text


class SupabaseMarketplaceStore:
    """Marketplace store over a Supabase client."""

    def __init__(self, client: Client):
        self.client = client

    # === Profiles ===

    async def upsert_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        result = self.client.table(PROFILES_TABLE).upsert(profile).execute()
        return _first(result) or profile

    async def upsert_role_record(self, role: str, record: dict[str, Any]) -> dict[str, Any]:
        result = self.client.table(ROLE_TABLES[role]).upsert(record).execute()
        return _first(result) or record

    async def get_profile(self, user_id: str) -> Optional[dict[str, Any]]:
        result = self.client.table(PROFILES_TABLE).select("*").eq("id", user_id).execute()
        return _first(result)

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
        result = self.client.table(PROFILES_TABLE).update(updates).eq("id", user_id).execute()
        return _first(result)

    # === Jobs ===

    async def insert_job(self, farmer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        result = (
            self.client.table(JOB_POSTINGS_TABLE)
            .insert({"farmer_id": farmer_id, **data})
            .execute()
        )
        job = _first(result)
        if job is None:
            raise StoreError("Job insert returned no row")
        return job

    async def get_job(self, job_id: str) -> Optional[dict[str, Any]]:
        result = self.client.table(JOB_POSTINGS_TABLE).select("*").eq("id", job_id).execute()
        return _first(result)

    async def list_jobs(
        self,
        status: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        query = self.client.table(JOB_POSTINGS_TABLE).select(JOB_WITH_FARMER_SELECT)

        if status:
            query = query.eq("status", status)
        if location:
            query = query.ilike("location", f"%{location}%")
        if skills:
            query = query.overlaps("required_skills", skills)

        result = query.order("created_at", desc=True).execute()
        return [{**job, "farmer": flatten_person(job.get("farmer"))} for job in result.data or []]

    async def list_jobs_for_farmer(self, farmer_id: str) -> list[dict[str, Any]]:
        result = (
            self.client.table(JOB_POSTINGS_TABLE)
            .select("*")
            .eq("farmer_id", farmer_id)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def update_job_status(self, job_id: str, status: str) -> Optional[dict[str, Any]]:
        result = (
            self.client.table(JOB_POSTINGS_TABLE)
            .update({"status": status})
            .eq("id", job_id)
            .execute()
        )
        return _first(result)

    async def delete_job(self, job_id: str, farmer_id: str) -> None:
        (
            self.client.table(JOB_POSTINGS_TABLE)
            .delete()
            .eq("id", job_id)
            .eq("farmer_id", farmer_id)
            .execute()
        )

    # === Applications ===

    async def insert_application(
        self, job_id: str, labourer_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        row = {
            "job_id": job_id,
            "labourer_id": labourer_id,
            "message": data.get("message"),
            "status": "pending",
        }
        if data.get("proposed_rate") is not None:
            row["proposed_rate"] = data["proposed_rate"]
        try:
            result = self.client.table(JOB_APPLICATIONS_TABLE).insert(row).execute()
        except Exception as e:
            if _is_duplicate(e):
                raise DuplicateRecordError(str(e)) from e
            raise
        application = _first(result)
        if application is None:
            raise StoreError("Application insert returned no row")
        return application

    async def get_application(self, application_id: str) -> Optional[dict[str, Any]]:
        result = (
            self.client.table(JOB_APPLICATIONS_TABLE)
            .select("*")
            .eq("id", application_id)
            .execute()
        )
        return _first(result)

    async def list_applications_for_job(self, job_id: str) -> list[dict[str, Any]]:
        result = (
            self.client.table(JOB_APPLICATIONS_TABLE)
            .select(APPLICATION_WITH_LABOURER_SELECT)
            .eq("job_id", job_id)
            .order("applied_at", desc=True)
            .execute()
        )
        return [
            {**app, "labourer": flatten_person(app.get("labourer"))} for app in result.data or []
        ]

    async def list_applications_for_labourer(self, labourer_id: str) -> list[dict[str, Any]]:
        result = (
            self.client.table(JOB_APPLICATIONS_TABLE)
            .select(APPLICATION_WITH_JOB_SELECT)
            .eq("labourer_id", labourer_id)
            .order("applied_at", desc=True)
            .execute()
        )
        applications = []
        for app in result.data or []:
            job = app.get("job")
            if job:
                job = {**job, "farmer": flatten_person(job.get("farmer"))}
            applications.append({**app, "job": job})
        return applications

    async def update_application_status(
        self, application_id: str, status: str
    ) -> Optional[dict[str, Any]]:
        result = (
            self.client.table(JOB_APPLICATIONS_TABLE)
            .update({"status": status})
            .eq("id", application_id)
            .execute()
        )
        return _first(result)
