"""
Job and application service.

Creates postings, lists and filters them, takes applications and moves
applications and jobs between statuses. Every backend call is wrapped so
failures are logged before they propagate.
"""

from typing import Any, Iterable, Optional

from ..logging_config import get_logger, log_job_event
from ..models import ApplicationCreate, JobCreate
from ..storage import DuplicateRecordError, MarketplaceStore
from .errors import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    InvalidTransitionError,
    JobNotFoundError,
    PermissionDeniedError,
)

logger = get_logger("agriconnect.jobs")

JOB_STATUSES = ("open", "in_progress", "completed", "cancelled")
APPLICATION_DECISIONS = ("accepted", "rejected")


def _matches_text(value: Optional[str], needle: str) -> bool:
    return needle in (value or "").lower()


def filter_jobs(
    jobs: Iterable[dict[str, Any]],
    search: Optional[str] = None,
    location: Optional[str] = None,
    skills: Optional[Iterable[str]] = None,
) -> list[dict[str, Any]]:
    """Client-side job filter.

    - search: case-insensitive substring of title or description
    - location: case-insensitive substring of the job location
    - skills: job requires at least one of them (case-insensitive)

    Empty filters match every job. Order is preserved.
    """
    term = (search or "").strip().lower()
    place = (location or "").strip().lower()
    wanted = {s.strip().lower() for s in skills or () if s and s.strip()}

    matched = []
    for job in jobs:
        if term and not (
            _matches_text(job.get("title"), term) or _matches_text(job.get("description"), term)
        ):
            continue
        if place and not _matches_text(job.get("location"), place):
            continue
        if wanted and not any(s.lower() in wanted for s in job.get("required_skills") or []):
            continue
        matched.append(job)
    return matched


class JobService:
    """Marketplace operations over a :class:`MarketplaceStore`."""

    def __init__(self, store: MarketplaceStore):
        self.store = store

    # === Jobs ===

    async def create_job(self, farmer_id: str, data: JobCreate) -> dict[str, Any]:
        payload = data.model_dump(mode="json")
        try:
            job = await self.store.insert_job(farmer_id, payload)
        except Exception as e:
            logger.error(f"Create job error: {e}")
            raise
        log_job_event("job_created", job["id"], farmer_id, title=data.title[:50])
        return job

    async def get_jobs(
        self,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
        status: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List jobs with their farmer, newest first."""
        try:
            return await self.store.list_jobs(status=status, location=location, skills=skills)
        except Exception as e:
            logger.error(f"Get jobs error: {e}")
            raise

    async def get_job(self, job_id: str) -> dict[str, Any]:
        try:
            job = await self.store.get_job(job_id)
        except Exception as e:
            logger.error(f"Get job error: {e}")
            raise
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def get_my_jobs(self, farmer_id: str) -> list[dict[str, Any]]:
        try:
            return await self.store.list_jobs_for_farmer(farmer_id)
        except Exception as e:
            logger.error(f"Get my jobs error: {e}")
            raise

    async def _owned_job(self, job_id: str, farmer_id: str) -> dict[str, Any]:
        job = await self.get_job(job_id)
        if job["farmer_id"] != farmer_id:
            raise PermissionDeniedError("Only the farmer who posted this job can do this")
        return job

    async def update_job_status(self, job_id: str, status: str, farmer_id: str) -> dict[str, Any]:
        """Set a job's status. Any status may follow any other."""
        if status not in JOB_STATUSES:
            raise InvalidTransitionError(f"Unknown job status: {status}")
        job = await self._owned_job(job_id, farmer_id)
        try:
            updated = await self.store.update_job_status(job_id, status)
        except Exception as e:
            logger.error(f"Update job status error: {e}")
            raise
        if updated is None:
            raise JobNotFoundError(job_id)
        log_job_event("job_status", job_id, farmer_id, old=job["status"], new=status)
        return updated

    async def delete_job(self, job_id: str, farmer_id: str) -> None:
        await self._owned_job(job_id, farmer_id)
        try:
            await self.store.delete_job(job_id, farmer_id)
        except Exception as e:
            logger.error(f"Delete job error: {e}")
            raise
        log_job_event("job_deleted", job_id, farmer_id)

    # === Applications ===

    async def apply_for_job(
        self, job_id: str, labourer_id: str, data: ApplicationCreate
    ) -> dict[str, Any]:
        """Submit a pending application to an open job."""
        job = await self.get_job(job_id)
        if job["farmer_id"] == labourer_id:
            raise PermissionDeniedError("Cannot apply to your own job")
        if job["status"] != "open":
            raise InvalidTransitionError(f"Cannot apply to job in status: {job['status']}")

        try:
            application = await self.store.insert_application(
                job_id, labourer_id, data.model_dump(exclude_none=True)
            )
        except DuplicateRecordError as e:
            raise DuplicateApplicationError() from e
        except Exception as e:
            logger.error(f"Apply for job error: {e}")
            raise
        log_job_event("application_created", application["id"], labourer_id, job=job_id)
        return application

    async def get_job_applications(self, job_id: str) -> list[dict[str, Any]]:
        """Applications for a job with their labourer, newest first."""
        try:
            return await self.store.list_applications_for_job(job_id)
        except Exception as e:
            logger.error(f"Get job applications error: {e}")
            raise

    async def get_applications_for_owner(self, job_id: str, farmer_id: str) -> list[dict[str, Any]]:
        await self._owned_job(job_id, farmer_id)
        return await self.get_job_applications(job_id)

    async def get_my_applications(self, labourer_id: str) -> list[dict[str, Any]]:
        """A labourer's applications with their job and its farmer, newest first."""
        try:
            return await self.store.list_applications_for_labourer(labourer_id)
        except Exception as e:
            logger.error(f"Get my applications error: {e}")
            raise

    async def update_application_status(
        self, application_id: str, status: str, farmer_id: str
    ) -> dict[str, Any]:
        """Accept or reject a pending application on one of the farmer's jobs."""
        if status not in APPLICATION_DECISIONS:
            raise InvalidTransitionError(f"Applications can only be accepted or rejected, not {status}")

        try:
            application = await self.store.get_application(application_id)
        except Exception as e:
            logger.error(f"Get application error: {e}")
            raise
        if application is None:
            raise ApplicationNotFoundError(application_id)

        await self._owned_job(application["job_id"], farmer_id)

        if application["status"] != "pending":
            raise InvalidTransitionError(f"Application is already {application['status']}")

        try:
            updated = await self.store.update_application_status(application_id, status)
        except Exception as e:
            logger.error(f"Update application status error: {e}")
            raise
        if updated is None:
            raise ApplicationNotFoundError(application_id)
        log_job_event("application_status", application_id, farmer_id, new=status)
        return updated
