"""Dashboard routes.

Each action answers with the refreshed dashboard so a client can re-render
from one response.
"""

from fastapi import APIRouter, Query, Request, status

from ..auth import CurrentUser
from ..dashboard import DashboardViewModel
from ..database import Crops, Jobs, Tools
from ..logging_config import get_logger
from ..models import (
    ApplicationCreate,
    ApplicationStatusUpdate,
    DashboardSnapshot,
    JobCreate,
)
from ..rate_limit import limiter

logger = get_logger("agriconnect.routes.dashboard")
router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSnapshot)
async def get_dashboard(
    auth: CurrentUser,
    jobs: Jobs,
    crops: Crops,
    tools: Tools,
    search: str | None = None,
    location: str | None = None,
    skills: list[str] | None = Query(None),
):
    """
    Everything the signed-in user's dashboard shows.

    Farmers get their posted jobs and pending applications; labourers get
    their sent applications. Both get open jobs, crop prices and tools.
    """
    view = DashboardViewModel(auth, jobs, crops, tools)
    view.set_filters(search=search, location=location, skills=skills)
    await view.load()
    return view.snapshot()


@router.post("/jobs", response_model=DashboardSnapshot, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def post_job_from_dashboard(
    request: Request,
    job: JobCreate,
    auth: CurrentUser,
    jobs: Jobs,
    crops: Crops,
    tools: Tools,
):
    """Post a job and return the refreshed dashboard."""
    logger.info(f"POST /dashboard/jobs | farmer={auth.user_id} | title={job.title[:50]}")
    view = DashboardViewModel(auth, jobs, crops, tools)
    await view.post_job(job)
    await view.load()
    return view.snapshot()


@router.post(
    "/jobs/{job_id}/apply", response_model=DashboardSnapshot, status_code=status.HTTP_201_CREATED
)
@limiter.limit("30/minute")
async def apply_from_dashboard(
    request: Request,
    job_id: str,
    application: ApplicationCreate,
    auth: CurrentUser,
    jobs: Jobs,
    crops: Crops,
    tools: Tools,
):
    logger.info(f"POST /dashboard/jobs/{job_id}/apply | labourer={auth.user_id}")
    view = DashboardViewModel(auth, jobs, crops, tools)
    await view.apply(job_id, application)
    await view.load()
    return view.snapshot()


@router.patch("/applications/{application_id}", response_model=DashboardSnapshot)
@limiter.limit("30/minute")
async def decide_application_from_dashboard(
    request: Request,
    application_id: str,
    decision: ApplicationStatusUpdate,
    auth: CurrentUser,
    jobs: Jobs,
    crops: Crops,
    tools: Tools,
):
    """Accept or reject an application and return the refreshed dashboard."""
    logger.info(
        f"PATCH /dashboard/applications/{application_id} | farmer={auth.user_id} | status={decision.status}"
    )
    view = DashboardViewModel(auth, jobs, crops, tools)
    await view.handle_application_action(application_id, decision.status)
    await view.load()
    return view.snapshot()
