"""Tests for the in-memory marketplace store."""

import pytest

from agriconnect.storage import DuplicateRecordError, InMemoryMarketplaceStore, default_role_record


def _job_data(**overrides):
    data = {
        "title": "Sowing",
        "description": "Sow groundnut",
        "required_skills": ["Sowing"],
        "location": "Kurnool",
        "pay_rate": 450.0,
        "contact_number": "9111111111",
    }
    data.update(overrides)
    return data


@pytest.fixture
def store():
    return InMemoryMarketplaceStore()


class TestJobs:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_open_status(self, store):
        first = await store.insert_job("f1", _job_data())
        second = await store.insert_job("f1", _job_data(status="completed"))

        assert first["id"] == "job-1"
        assert second["id"] == "job-2"
        assert second["status"] == "open"
        assert first["created_at"]

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store):
        for title in ("a", "b", "c"):
            await store.insert_job("f1", _job_data(title=title))

        jobs = await store.list_jobs()

        assert [j["title"] for j in jobs] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_list_filters(self, store):
        await store.insert_job("f1", _job_data(location="Kurnool Town"))
        await store.insert_job("f1", _job_data(location="Nellore", required_skills=["Irrigation"]))
        closed = await store.insert_job("f1", _job_data(location="Nellore"))
        await store.update_job_status(closed["id"], "completed")

        assert len(await store.list_jobs(location="kurnool")) == 1
        assert len(await store.list_jobs(skills=["Irrigation", "Pruning"])) == 1
        assert len(await store.list_jobs(status="open", location="nellore")) == 1

    @pytest.mark.asyncio
    async def test_farmer_fallback_and_profile_merge(self, store):
        await store.insert_job("f1", _job_data())
        await store.insert_job("f2", _job_data())
        await store.upsert_profile({"id": "f2", "full_name": "Lakshmi", "role": "farmer"})
        await store.upsert_role_record("farmer", default_role_record("farmer", "f2"))

        by_farmer = {j["farmer_id"]: j["farmer"] for j in await store.list_jobs()}

        assert by_farmer["f1"]["full_name"] == "Demo Farmer"
        assert by_farmer["f2"]["full_name"] == "Lakshmi"
        assert by_farmer["f2"]["verified"] is False

    @pytest.mark.asyncio
    async def test_returned_rows_are_copies(self, store):
        job = await store.insert_job("f1", _job_data())
        job["title"] = "changed"

        assert (await store.get_job("job-1"))["title"] == "Sowing"

    @pytest.mark.asyncio
    async def test_delete_requires_matching_farmer(self, store):
        job = await store.insert_job("f1", _job_data())

        await store.delete_job(job["id"], "f2")
        assert await store.get_job(job["id"]) is not None

        await store.delete_job(job["id"], "f1")
        assert await store.get_job(job["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_removes_job_applications(self, store):
        job = await store.insert_job("f1", _job_data())
        other = await store.insert_job("f1", _job_data())
        await store.insert_application(job["id"], "l1", {})
        await store.insert_application(other["id"], "l1", {})

        await store.delete_job(job["id"], "f1")

        assert await store.list_applications_for_job(job["id"]) == []
        mine = await store.list_applications_for_labourer("l1")
        assert [a["job_id"] for a in mine] == [other["id"]]

    @pytest.mark.asyncio
    async def test_delete_by_other_farmer_keeps_applications(self, store):
        job = await store.insert_job("f1", _job_data())
        await store.insert_application(job["id"], "l1", {})

        await store.delete_job(job["id"], "f2")

        assert len(await store.list_applications_for_job(job["id"])) == 1

    @pytest.mark.asyncio
    async def test_skill_filter_ignores_case(self, store):
        await store.insert_job("f1", _job_data(required_skills=["Harvesting", "Threshing"]))

        assert len(await store.list_jobs(skills=["harvesting"])) == 1
        assert len(await store.list_jobs(skills=["THRESHING", "Pruning"])) == 1
        assert await store.list_jobs(skills=["pruning"]) == []


class TestApplications:
    @pytest.mark.asyncio
    async def test_duplicate_pair_rejected(self, store):
        await store.insert_application("job-1", "l1", {})

        with pytest.raises(DuplicateRecordError):
            await store.insert_application("job-1", "l1", {"message": "again"})

        # Same labourer, different job is fine
        await store.insert_application("job-2", "l1", {})

    @pytest.mark.asyncio
    async def test_applications_for_job_with_labourer(self, store):
        await store.insert_application("job-1", "l1", {"message": "first"})
        await store.insert_application("job-1", "l2", {"message": "second"})

        apps = await store.list_applications_for_job("job-1")

        assert [a["message"] for a in apps] == ["second", "first"]
        assert apps[0]["labourer"]["skills"] == ["Harvesting", "Plowing"]

    @pytest.mark.asyncio
    async def test_update_missing_application(self, store):
        assert await store.update_application_status("app-1", "accepted") is None

    @pytest.mark.asyncio
    async def test_update_missing_profile(self, store):
        assert await store.update_profile("nobody", {"full_name": "x"}) is None


def test_default_role_record_unknown_role():
    with pytest.raises(ValueError):
        default_role_record("admin", "u1")
