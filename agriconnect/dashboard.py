"""Dashboard view-model.

Holds one user's loaded collections, derives the filtered and sorted views the
dashboard shows, and reloads the affected collections after each action.
"""

import asyncio
from typing import Any, Iterable, Optional

from .auth import AuthContext
from .logging_config import get_logger
from .models import ApplicationCreate, DashboardSnapshot, DashboardStats, JobCreate
from .services import CropService, JobService, ToolService, filter_jobs

logger = get_logger("agriconnect.dashboard")

LOAD_ERROR = "Failed to load dashboard data"
RECENT_ACTIVITY_LIMIT = 5


def _newest_first(applications: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(applications, key=lambda a: str(a.get("applied_at") or ""), reverse=True)


class DashboardViewModel:
    def __init__(
        self,
        user: AuthContext,
        jobs: JobService,
        crops: CropService,
        tools: ToolService,
    ):
        self.user = user
        self.job_service = jobs
        self.crop_service = crops
        self.tool_service = tools

        self.jobs: list[dict[str, Any]] = []
        self.my_jobs: list[dict[str, Any]] = []
        self.applications: list[dict[str, Any]] = []
        self.my_applications: list[dict[str, Any]] = []
        self.crop_prices: list[dict[str, Any]] = []
        self.smart_tools: list[dict[str, Any]] = []

        self.search_term = ""
        self.location_filter = ""
        self.skills_filter: list[str] = []

        self.loading = False
        self.error: Optional[str] = None

    @property
    def is_farmer(self) -> bool:
        return self.user.is_farmer

    # === Loading ===

    async def load(self) -> None:
        """Load every collection concurrently."""
        self.loading = True
        self.error = None
        try:
            await asyncio.gather(
                self.load_jobs(),
                self.load_my_data(),
                self.load_crop_prices(),
                self.load_smart_tools(),
            )
        except Exception as e:
            logger.error(f"Error loading data: {e}")
            self.error = LOAD_ERROR
        finally:
            self.loading = False

    async def load_jobs(self) -> None:
        try:
            self.jobs = await self.job_service.get_jobs(
                location=self.location_filter or None,
                skills=self.skills_filter or None,
                status="open",
            )
        except Exception as e:
            logger.error(f"Error loading jobs: {e}")

    async def load_my_data(self) -> None:
        """Farmer: own jobs and every application to them. Labourer: own applications."""
        try:
            if self.is_farmer:
                self.my_jobs = await self.job_service.get_my_jobs(self.user.user_id)
                applications = []
                for job in self.my_jobs:
                    for application in await self.job_service.get_job_applications(job["id"]):
                        applications.append({**application, "job": job})
                self.applications = applications
            else:
                self.my_applications = await self.job_service.get_my_applications(
                    self.user.user_id
                )
        except Exception as e:
            logger.error(f"Error loading my data: {e}")

    async def load_crop_prices(self) -> None:
        try:
            self.crop_prices = await self.crop_service.get_price_predictions()
        except Exception as e:
            logger.error(f"Error loading crop prices: {e}")

    async def load_smart_tools(self) -> None:
        try:
            self.smart_tools = await self.tool_service.get_farming_tools()
        except Exception as e:
            logger.error(f"Error loading smart tools: {e}")

    # === Derived views ===

    def set_filters(
        self,
        search: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
    ) -> None:
        self.search_term = search or ""
        self.location_filter = location or ""
        self.skills_filter = list(skills or [])

    @property
    def filtered_jobs(self) -> list[dict[str, Any]]:
        return filter_jobs(self.jobs, self.search_term, self.location_filter, self.skills_filter)

    @property
    def pending_applications(self) -> list[dict[str, Any]]:
        return [a for a in self.applications if a.get("status") == "pending"]

    @property
    def recent_activity(self) -> list[dict[str, Any]]:
        source = self.pending_applications if self.is_farmer else self.my_applications
        return _newest_first(source)[:RECENT_ACTIVITY_LIMIT]

    @property
    def stats(self) -> DashboardStats:
        return DashboardStats(
            jobs_posted=len(self.my_jobs),
            pending_applications=len(self.pending_applications),
            available_jobs=len(self.filtered_jobs),
            applications_sent=len(self.my_applications),
            price_alerts=len(self.crop_prices),
            tools_available=len(self.smart_tools),
        )

    # === Actions ===

    async def post_job(self, data: JobCreate) -> dict[str, Any]:
        self.user.require_role("farmer")
        job = await self.job_service.create_job(self.user.user_id, data)
        await asyncio.gather(self.load_my_data(), self.load_jobs())
        return job

    async def apply(self, job_id: str, data: ApplicationCreate) -> dict[str, Any]:
        self.user.require_role("labourer")
        application = await self.job_service.apply_for_job(job_id, self.user.user_id, data)
        await self.load_my_data()
        return application

    async def handle_application_action(self, application_id: str, action: str) -> dict[str, Any]:
        self.user.require_role("farmer")
        updated = await self.job_service.update_application_status(
            application_id, action, self.user.user_id
        )
        await self.load_my_data()
        return updated

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            role=self.user.role,
            user_id=self.user.user_id,
            stats=self.stats,
            jobs=self.filtered_jobs,
            my_jobs=self.my_jobs,
            applications=self.applications,
            my_applications=self.my_applications,
            recent_activity=self.recent_activity,
            crop_prices=self.crop_prices,
            smart_tools=self.smart_tools,
            error=self.error,
        )
