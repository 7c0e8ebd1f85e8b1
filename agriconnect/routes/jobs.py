"""Job posting and application routes.

Farmers post jobs and review applications; labourers browse open jobs and
apply.
"""

from typing import Literal

from fastapi import APIRouter, Query, Request, Response, status

from ..auth import CurrentUser
from ..database import Jobs
from ..logging_config import get_logger
from ..models import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationStatusUpdate,
    ApplicationWithLabourer,
    JobApplication,
    JobCreate,
    JobListResponse,
    JobPosting,
    JobStatus,
    JobStatusUpdate,
    MyApplicationListResponse,
)
from ..rate_limit import limiter
from ..services import filter_jobs

logger = get_logger("agriconnect.routes.jobs")
router = APIRouter(prefix="/jobs", tags=["jobs"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])


# =============================================================================
# Jobs
# =============================================================================


@router.post("", response_model=JobPosting, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_job_posting(
    request: Request,
    job: JobCreate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """
    Post a new job.

    The authenticated farmer becomes the job owner. Jobs start 'open'.
    """
    auth.require_role("farmer")
    logger.info(f"POST /jobs | farmer={auth.user_id} | title={job.title[:50]}")
    return await jobs.create_job(auth.user_id, job)


@router.get("", response_model=JobListResponse)
@limiter.limit("60/minute")
async def list_job_postings(
    request: Request,
    auth: CurrentUser,
    jobs: Jobs,
    status_filter: JobStatus | Literal["all"] = Query(
        "open", alias="status", description="Job status, or 'all' for every status"
    ),
    location: str | None = Query(None, description="Case-insensitive substring of the job location"),
    skills: list[str] | None = Query(None, description="Jobs requiring ANY of these skills"),
    search: str | None = Query(None, description="Substring of title or description"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """
    List jobs with their farmer, newest first.

    Status, location and skills are filtered by the backend; search is
    applied afterwards over title and description.
    """
    job_status = None if status_filter == "all" else status_filter
    logger.info(
        f"GET /jobs | user={auth.user_id} | status={status_filter} | location={location} | skills={skills}"
    )
    found = await jobs.get_jobs(location=location, skills=skills, status=job_status)
    if search:
        found = filter_jobs(found, search=search)

    return JobListResponse(
        jobs=found[offset : offset + limit],
        total=len(found),
        limit=limit,
        offset=offset,
    )


@router.get("/mine", response_model=list[JobPosting])
async def list_my_jobs(auth: CurrentUser, jobs: Jobs):
    """Jobs posted by the signed-in farmer."""
    auth.require_role("farmer")
    return await jobs.get_my_jobs(auth.user_id)


@router.get("/{job_id}", response_model=JobPosting)
async def get_job_details(job_id: str, auth: CurrentUser, jobs: Jobs):
    return await jobs.get_job(job_id)


@router.patch("/{job_id}/status", response_model=JobPosting)
@limiter.limit("30/minute")
async def update_job_status(
    request: Request,
    job_id: str,
    update: JobStatusUpdate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """Change a job's status. Only the job's farmer can."""
    logger.info(f"PATCH /jobs/{job_id}/status | farmer={auth.user_id} | status={update.status}")
    return await jobs.update_job_status(job_id, update.status, auth.user_id)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(job_id: str, auth: CurrentUser, jobs: Jobs):
    """Delete a job. Only the job's farmer can."""
    logger.info(f"DELETE /jobs/{job_id} | farmer={auth.user_id}")
    await jobs.delete_job(job_id, auth.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Applications
# =============================================================================


@router.post(
    "/{job_id}/apply", response_model=JobApplication, status_code=status.HTTP_201_CREATED
)
@limiter.limit("30/minute")
async def apply_to_job(
    request: Request,
    job_id: str,
    application: ApplicationCreate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """
    Apply for an open job.

    Labourers only; one application per labourer per job.
    """
    auth.require_role("labourer")
    logger.info(f"POST /jobs/{job_id}/apply | labourer={auth.user_id}")
    return await jobs.apply_for_job(job_id, auth.user_id, application)


@router.get("/{job_id}/applications", response_model=ApplicationListResponse)
async def list_job_applications(job_id: str, auth: CurrentUser, jobs: Jobs):
    """Applications for a job with each labourer. Only the job's farmer can view them."""
    applications = await jobs.get_applications_for_owner(job_id, auth.user_id)
    return ApplicationListResponse(
        applications=[ApplicationWithLabourer.model_validate(a) for a in applications],
        total=len(applications),
    )


@applications_router.get("/mine", response_model=MyApplicationListResponse)
async def list_my_applications(auth: CurrentUser, jobs: Jobs):
    """The signed-in labourer's applications with their jobs."""
    auth.require_role("labourer")
    applications = await jobs.get_my_applications(auth.user_id)
    return MyApplicationListResponse(applications=applications, total=len(applications))


@applications_router.patch("/{application_id}", response_model=JobApplication)
@limiter.limit("30/minute")
async def decide_application(
    request: Request,
    application_id: str,
    decision: ApplicationStatusUpdate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """Accept or reject a pending application to one of your jobs."""
    auth.require_role("farmer")
    logger.info(
        f"PATCH /applications/{application_id} | farmer={auth.user_id} | status={decision.status}"
    )
    return await jobs.update_application_status(application_id, decision.status, auth.user_id)
