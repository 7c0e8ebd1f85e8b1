"""In-memory marketplace storage for demo mode and tests."""

import copy
from typing import Any, Optional

from .base import DuplicateRecordError, ROLE_TABLES, utc_now_iso

DEMO_FARMER = {"full_name": "Demo Farmer", "rating": 4.5, "total_jobs_posted": 10}
DEMO_LABOURER = {
    "full_name": "Demo Labourer",
    "rating": 4.2,
    "skills": ["Harvesting", "Plowing"],
    "experience_years": 5,
}


def _newest_first(rows: list[dict], key: str) -> list[dict]:
    # Reversed first so rows with equal timestamps keep latest-inserted first.
    return sorted(reversed(rows), key=lambda r: r[key], reverse=True)


class InMemoryMarketplaceStore:
    """Process-local store used when Supabase is not configured."""

    def __init__(self):
        self._profiles: dict[str, dict] = {}
        self._role_records: dict[str, dict[str, dict]] = {role: {} for role in ROLE_TABLES}
        self._jobs: list[dict] = []
        self._applications: list[dict] = []
        self._job_counter = 1
        self._app_counter = 1

    # === Profiles ===

    async def upsert_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        existing = self._profiles.get(profile["id"], {})
        merged = {**existing, **profile}
        self._profiles[profile["id"]] = merged
        return copy.deepcopy(merged)

    async def upsert_role_record(self, role: str, record: dict[str, Any]) -> dict[str, Any]:
        records = self._role_records[role]
        merged = {**records.get(record["id"], {}), **record}
        records[record["id"]] = merged
        return copy.deepcopy(merged)

    async def get_profile(self, user_id: str) -> Optional[dict[str, Any]]:
        profile = self._profiles.get(user_id)
        return copy.deepcopy(profile) if profile else None

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        profile.update(updates)
        return copy.deepcopy(profile)

    def _person(self, role: str, user_id: str, fallback: dict) -> dict:
        """Role row merged with its profile, or the demo placeholder."""
        profile = self._profiles.get(user_id)
        record = self._role_records[role].get(user_id)
        if profile is None and record is None:
            return {"id": user_id, **fallback}
        return {**(record or {}), **(profile or {}), "id": user_id}

    def _with_farmer(self, job: dict) -> dict:
        return {**job, "farmer": self._person("farmer", job["farmer_id"], DEMO_FARMER)}

    # === Jobs ===

    async def insert_job(self, farmer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        job = {
            "id": f"job-{self._job_counter}",
            "farmer_id": farmer_id,
            **data,
            "status": "open",
            "created_at": utc_now_iso(),
        }
        self._job_counter += 1
        self._jobs.append(job)
        return copy.deepcopy(job)

    async def get_job(self, job_id: str) -> Optional[dict[str, Any]]:
        job = self._find_job(job_id)
        return copy.deepcopy(job) if job else None

    def _find_job(self, job_id: str) -> Optional[dict]:
        return next((j for j in self._jobs if j["id"] == job_id), None)

    async def list_jobs(
        self,
        status: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        jobs = list(self._jobs)

        if status:
            jobs = [j for j in jobs if j["status"] == status]
        if location:
            needle = location.lower()
            jobs = [j for j in jobs if needle in j.get("location", "").lower()]
        if skills:
            wanted = {s.lower() for s in skills}
            jobs = [
                j for j in jobs if any(s.lower() in wanted for s in j.get("required_skills") or [])
            ]

        jobs = _newest_first(jobs, "created_at")
        return [copy.deepcopy(self._with_farmer(j)) for j in jobs]

    async def list_jobs_for_farmer(self, farmer_id: str) -> list[dict[str, Any]]:
        jobs = [j for j in self._jobs if j["farmer_id"] == farmer_id]
        jobs = _newest_first(jobs, "created_at")
        return copy.deepcopy(jobs)

    async def update_job_status(self, job_id: str, status: str) -> Optional[dict[str, Any]]:
        job = self._find_job(job_id)
        if job is None:
            return None
        job["status"] = status
        return copy.deepcopy(job)

    async def delete_job(self, job_id: str, farmer_id: str) -> None:
        job = self._find_job(job_id)
        if job is None or job["farmer_id"] != farmer_id:
            return
        self._jobs = [j for j in self._jobs if j["id"] != job_id]
        # Applications go with their job, like the backend's ON DELETE CASCADE
        self._applications = [a for a in self._applications if a["job_id"] != job_id]

    # === Applications ===

    async def insert_application(
        self, job_id: str, labourer_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        for existing in self._applications:
            if existing["job_id"] == job_id and existing["labourer_id"] == labourer_id:
                raise DuplicateRecordError(
                    f"duplicate application for job {job_id} by {labourer_id}"
                )
        application = {
            "id": f"app-{self._app_counter}",
            "job_id": job_id,
            "labourer_id": labourer_id,
            "message": data.get("message"),
            "proposed_rate": data.get("proposed_rate"),
            "status": "pending",
            "applied_at": utc_now_iso(),
        }
        self._app_counter += 1
        self._applications.append(application)
        return copy.deepcopy(application)

    async def get_application(self, application_id: str) -> Optional[dict[str, Any]]:
        application = self._find_application(application_id)
        return copy.deepcopy(application) if application else None

    def _find_application(self, application_id: str) -> Optional[dict]:
        return next((a for a in self._applications if a["id"] == application_id), None)

    async def list_applications_for_job(self, job_id: str) -> list[dict[str, Any]]:
        apps = [a for a in self._applications if a["job_id"] == job_id]
        apps = _newest_first(apps, "applied_at")
        return [
            copy.deepcopy(
                {**a, "labourer": self._person("labourer", a["labourer_id"], DEMO_LABOURER)}
            )
            for a in apps
        ]

    async def list_applications_for_labourer(self, labourer_id: str) -> list[dict[str, Any]]:
        apps = [a for a in self._applications if a["labourer_id"] == labourer_id]
        apps = _newest_first(apps, "applied_at")
        enriched = []
        for a in apps:
            job = self._find_job(a["job_id"])
            enriched.append(copy.deepcopy({**a, "job": self._with_farmer(job) if job else None}))
        return enriched

    async def update_application_status(
        self, application_id: str, status: str
    ) -> Optional[dict[str, Any]]:
        application = self._find_application(application_id)
        if application is None:
            return None
        application["status"] = status
        return copy.deepcopy(application)
