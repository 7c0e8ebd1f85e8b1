"""Tests for the Supabase-backed store against a mocked client."""

from unittest.mock import MagicMock

import pytest

from agriconnect.storage import (
    DuplicateRecordError,
    StoreError,
    SupabaseMarketplaceStore,
    flatten_person,
)
from agriconnect.storage.cloud import JOB_WITH_FARMER_SELECT

QUERY_METHODS = ("select", "insert", "update", "upsert", "delete", "eq", "ilike", "overlaps", "order")


def make_client(data=None, error=None):
    """A client whose query builder returns itself and ``data`` on execute."""
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data)
    client = MagicMock()
    client.table.return_value = query
    return client, query


class TestFlattenPerson:
    def test_profile_merged_into_role_row(self):
        record = {"id": "f1", "rating": 4.0, "profile": {"id": "f1", "full_name": "Suresh"}}

        assert flatten_person(record) == {"id": "f1", "rating": 4.0, "full_name": "Suresh"}

    def test_missing_record(self):
        assert flatten_person(None) is None


class TestJobs:
    @pytest.mark.asyncio
    async def test_list_jobs_applies_filters(self):
        rows = [
            {
                "id": "j1",
                "title": "Sowing",
                "farmer": {"id": "f1", "rating": 4.5, "profile": {"full_name": "Suresh"}},
            }
        ]
        client, query = make_client(rows)

        jobs = await SupabaseMarketplaceStore(client).list_jobs(
            status="open", location="guntur", skills=["Sowing"]
        )

        client.table.assert_called_with("job_postings")
        query.select.assert_called_with(JOB_WITH_FARMER_SELECT)
        query.eq.assert_called_with("status", "open")
        query.ilike.assert_called_with("location", "%guntur%")
        query.overlaps.assert_called_with("required_skills", ["Sowing"])
        query.order.assert_called_with("created_at", desc=True)
        assert jobs[0]["farmer"] == {"id": "f1", "rating": 4.5, "full_name": "Suresh"}

    @pytest.mark.asyncio
    async def test_list_jobs_without_filters(self):
        client, query = make_client([])

        assert await SupabaseMarketplaceStore(client).list_jobs() == []
        query.eq.assert_not_called()
        query.ilike.assert_not_called()
        query.overlaps.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_job_without_row(self):
        client, _ = make_client([])

        with pytest.raises(StoreError):
            await SupabaseMarketplaceStore(client).insert_job("f1", {"title": "x"})

    @pytest.mark.asyncio
    async def test_get_missing_job(self):
        client, _ = make_client([])

        assert await SupabaseMarketplaceStore(client).get_job("nope") is None


class TestApplications:
    @pytest.mark.asyncio
    async def test_insert_application(self):
        row = {"id": "a1", "job_id": "j1", "labourer_id": "l1", "status": "pending"}
        client, query = make_client([row])

        result = await SupabaseMarketplaceStore(client).insert_application(
            "j1", "l1", {"message": "hi", "proposed_rate": 700}
        )

        assert result == row
        inserted = query.insert.call_args[0][0]
        assert inserted["status"] == "pending"
        assert inserted["proposed_rate"] == 700

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_duplicate(self):
        error = Exception('duplicate key value violates unique constraint "job_applications_job_id_labourer_id_key"')
        client, _ = make_client(error=error)

        with pytest.raises(DuplicateRecordError):
            await SupabaseMarketplaceStore(client).insert_application("j1", "l1", {})

    @pytest.mark.asyncio
    async def test_other_insert_errors_propagate(self):
        client, _ = make_client(error=RuntimeError("connection refused"))

        with pytest.raises(RuntimeError):
            await SupabaseMarketplaceStore(client).insert_application("j1", "l1", {})

    @pytest.mark.asyncio
    async def test_applications_for_labourer_flatten_farmer(self):
        rows = [
            {
                "id": "a1",
                "job": {"id": "j1", "farmer": {"id": "f1", "profile": {"full_name": "Suresh"}}},
            }
        ]
        client, query = make_client(rows)

        apps = await SupabaseMarketplaceStore(client).list_applications_for_labourer("l1")

        query.eq.assert_called_with("labourer_id", "l1")
        assert apps[0]["job"]["farmer"] == {"id": "f1", "full_name": "Suresh"}
