"""Tests for the job service and the job filter."""

from unittest.mock import AsyncMock

import pytest

from agriconnect.models import ApplicationCreate, JobCreate
from agriconnect.services import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    InvalidTransitionError,
    JobNotFoundError,
    JobService,
    PermissionDeniedError,
    filter_jobs,
)
from agriconnect.storage import InMemoryMarketplaceStore, StoreError

FARMER = "farmer-1"
LABOURER = "labourer-1"


def _job(**overrides) -> JobCreate:
    data = {
        "title": "Cotton picking",
        "description": "Pick cotton for three days",
        "required_skills": ["Harvesting"],
        "location": "Adilabad",
        "pay_rate": 500,
        "contact_number": "9000000000",
    }
    data.update(overrides)
    return JobCreate(**data)


@pytest.fixture
def service():
    return JobService(InMemoryMarketplaceStore())


class TestFilterJobs:
    JOBS = [
        {
            "title": "Paddy harvesting",
            "description": "Harvest five acres",
            "location": "Guntur",
            "required_skills": ["Harvesting"],
        },
        {
            "title": "Tractor driver",
            "description": "Plough the north field",
            "location": "Warangal",
            "required_skills": ["Tractor Operation", "Plowing"],
        },
        {
            "title": "Weeding",
            "description": None,
            "location": "Guntur Rural",
            "required_skills": None,
        },
    ]

    def test_empty_filters_match_all(self):
        assert filter_jobs(self.JOBS) == self.JOBS

    def test_search_title_or_description(self):
        assert [j["title"] for j in filter_jobs(self.JOBS, search="plough")] == ["Tractor driver"]
        assert [j["title"] for j in filter_jobs(self.JOBS, search="HARVEST")] == [
            "Paddy harvesting"
        ]

    def test_location_substring(self):
        result = filter_jobs(self.JOBS, location="guntur")
        assert [j["title"] for j in result] == ["Paddy harvesting", "Weeding"]

    def test_any_skill_matches(self):
        result = filter_jobs(self.JOBS, skills=["plowing", "Irrigation"])
        assert [j["title"] for j in result] == ["Tractor driver"]

    def test_filters_combine(self):
        assert filter_jobs(self.JOBS, search="harvest", location="warangal") == []

    def test_blank_values_ignored(self):
        assert filter_jobs(self.JOBS, search="  ", location="", skills=["", " "]) == self.JOBS


class TestJobs:
    @pytest.mark.asyncio
    async def test_create_and_get(self, service):
        job = await service.create_job(FARMER, _job())

        assert job["status"] == "open"
        assert job["farmer_id"] == FARMER
        assert (await service.get_job(job["id"]))["title"] == "Cotton picking"

    @pytest.mark.asyncio
    async def test_get_missing_job(self, service):
        with pytest.raises(JobNotFoundError):
            await service.get_job("job-99")

    @pytest.mark.asyncio
    async def test_any_status_transition_allowed(self, service):
        job = await service.create_job(FARMER, _job())

        for status in ("completed", "open", "cancelled", "in_progress"):
            updated = await service.update_job_status(job["id"], status, FARMER)
            assert updated["status"] == status

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, service):
        job = await service.create_job(FARMER, _job())

        with pytest.raises(InvalidTransitionError):
            await service.update_job_status(job["id"], "archived", FARMER)

    @pytest.mark.asyncio
    async def test_only_owner_changes_status(self, service):
        job = await service.create_job(FARMER, _job())

        with pytest.raises(PermissionDeniedError):
            await service.update_job_status(job["id"], "cancelled", "farmer-2")

    @pytest.mark.asyncio
    async def test_delete_job(self, service):
        job = await service.create_job(FARMER, _job())

        await service.delete_job(job["id"], FARMER)

        assert await service.get_my_jobs(FARMER) == []

    @pytest.mark.asyncio
    async def test_backend_errors_propagate(self):
        store = AsyncMock()
        store.list_jobs.side_effect = StoreError("connection reset")

        with pytest.raises(StoreError):
            await JobService(store).get_jobs(status="open")


class TestApplications:
    @pytest.mark.asyncio
    async def test_apply_creates_pending_application(self, service):
        job = await service.create_job(FARMER, _job())

        application = await service.apply_for_job(
            job["id"], LABOURER, ApplicationCreate(message="Available now")
        )

        assert application["status"] == "pending"
        assert application["message"] == "Available now"
        assert application["proposed_rate"] is None

    @pytest.mark.asyncio
    async def test_duplicate_application(self, service):
        job = await service.create_job(FARMER, _job())
        await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

        with pytest.raises(DuplicateApplicationError):
            await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

    @pytest.mark.asyncio
    async def test_cannot_apply_to_own_job(self, service):
        job = await service.create_job(FARMER, _job())

        with pytest.raises(PermissionDeniedError):
            await service.apply_for_job(job["id"], FARMER, ApplicationCreate())

    @pytest.mark.asyncio
    async def test_cannot_apply_to_cancelled_job(self, service):
        job = await service.create_job(FARMER, _job())
        await service.update_job_status(job["id"], "cancelled", FARMER)

        with pytest.raises(InvalidTransitionError):
            await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

    @pytest.mark.asyncio
    async def test_accept_then_decision_is_final(self, service):
        job = await service.create_job(FARMER, _job())
        application = await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

        accepted = await service.update_application_status(application["id"], "accepted", FARMER)
        assert accepted["status"] == "accepted"

        with pytest.raises(InvalidTransitionError):
            await service.update_application_status(application["id"], "rejected", FARMER)

    @pytest.mark.asyncio
    async def test_decision_requires_job_owner(self, service):
        job = await service.create_job(FARMER, _job())
        application = await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

        with pytest.raises(PermissionDeniedError):
            await service.update_application_status(application["id"], "accepted", "farmer-2")

    @pytest.mark.asyncio
    async def test_decision_on_missing_application(self, service):
        with pytest.raises(ApplicationNotFoundError):
            await service.update_application_status("app-9", "accepted", FARMER)

    @pytest.mark.asyncio
    async def test_pending_is_not_a_decision(self, service):
        with pytest.raises(InvalidTransitionError):
            await service.update_application_status("app-1", "pending", FARMER)

    @pytest.mark.asyncio
    async def test_my_applications_include_job(self, service):
        job = await service.create_job(FARMER, _job())
        await service.apply_for_job(job["id"], LABOURER, ApplicationCreate())

        mine = await service.get_my_applications(LABOURER)

        assert len(mine) == 1
        assert mine[0]["job"]["id"] == job["id"]
        assert mine[0]["job"]["farmer"]["id"] == FARMER
