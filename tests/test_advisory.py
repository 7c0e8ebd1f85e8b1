"""Tests for crop, tool and market advisories."""

import random
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from agriconnect.models import ToolUsageCreate
from agriconnect.services import (
    CropService,
    GovernmentApiService,
    ToolService,
    calculate_price_change,
)
from agriconnect.services.tool_service import with_usage_stats


class TestPriceChange:
    def test_rise(self):
        assert calculate_price_change(100, 110) == {"change": 10, "percentage": 10.0, "trend": "up"}

    def test_fall(self):
        result = calculate_price_change(2000, 1900)
        assert result["trend"] == "down"
        assert result["percentage"] == -5.0

    def test_small_move_is_stable(self):
        assert calculate_price_change(100, 102)["trend"] == "stable"
        assert calculate_price_change(100, 98)["trend"] == "stable"

    def test_rounding(self):
        assert calculate_price_change(3, 4)["percentage"] == 33.33

    def test_zero_current_price(self):
        with pytest.raises(ValueError):
            calculate_price_change(0, 10)


class TestCropService:
    @pytest.mark.asyncio
    async def test_demo_crops(self):
        crops = await CropService().get_crops()
        assert [c["name"] for c in crops] == ["Rice", "Cotton", "Tomato"]

    @pytest.mark.asyncio
    async def test_demo_predictions_in_range(self):
        predictions = await CropService(rng=random.Random(3)).get_price_predictions()

        rice, cotton = predictions
        assert 2650 <= rice["predicted_price"] < 2850
        assert 5800 <= cotton["predicted_price"] < 6200
        assert rice["crop"]["name"] == "Rice"
        assert rice["prediction_date"] == (date.today() + timedelta(days=1)).isoformat()

    @pytest.mark.asyncio
    async def test_demo_predictions_filtered(self):
        service = CropService()

        assert [p["crop_id"] for p in await service.get_price_predictions(crop_id="2")] == ["2"]
        assert await service.get_price_predictions(location="kerala") == []

    @pytest.mark.asyncio
    async def test_latest_prices_most_confident_first(self):
        latest = await CropService(rng=random.Random(5)).get_latest_prices()
        scores = [p["confidence_score"] for p in latest]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_demo_search(self):
        assert [c["name"] for c in await CropService().search_crops(" tom ")] == ["Tomato"]

    @pytest.mark.asyncio
    async def test_crop_by_id_swallows_errors(self):
        client = MagicMock()
        client.table.side_effect = RuntimeError("offline")

        assert await CropService(client).get_crop_by_id("1") is None

    @pytest.mark.asyncio
    async def test_get_crops_errors_propagate(self):
        client = MagicMock()
        client.table.side_effect = RuntimeError("offline")

        with pytest.raises(RuntimeError):
            await CropService(client).get_crops()


class TestToolService:
    def test_usage_stats(self):
        tool = {
            "id": "t1",
            "tool_usage": [
                {"effectiveness_rating": 4},
                {"effectiveness_rating": 5},
                {"effectiveness_rating": None},
            ],
        }

        stats = with_usage_stats(tool)

        assert "tool_usage" not in stats
        assert stats["usage_count"] == 3
        assert stats["avg_rating"] == 4.5

    def test_usage_stats_without_ratings(self):
        assert with_usage_stats({"id": "t1"})["avg_rating"] == 0

    @pytest.mark.asyncio
    async def test_categories_sorted(self):
        assert await ToolService().get_tool_categories() == [
            "Irrigation",
            "Monitoring",
            "Spraying",
            "Testing",
        ]

    @pytest.mark.asyncio
    async def test_filter_by_category(self):
        tools = await ToolService().get_farming_tools("Testing")
        assert [t["name"] for t in tools] == ["Soil pH Meter"]

    @pytest.mark.asyncio
    async def test_recommended_tools(self):
        tools = await ToolService().get_recommended_tools(["Rice"])
        assert [t["id"] for t in tools] == ["tool1", "tool3"]

    @pytest.mark.asyncio
    async def test_search_tools(self):
        tools = await ToolService().search_tools("drone")
        assert [t["id"] for t in tools] == ["tool3"]

    @pytest.mark.asyncio
    async def test_record_and_list_usage(self):
        service = ToolService(usage_log=[])

        record = await service.record_tool_usage(
            "f1", ToolUsageCreate(tool_id="tool2", effectiveness_rating=5, notes="Handy")
        )
        await service.record_tool_usage("f2", ToolUsageCreate(tool_id="tool1"))

        assert record["id"].startswith("usage-")
        assert record["usage_date"] == date.today().isoformat()
        mine = await service.get_my_tool_usage("f1")
        assert len(mine) == 1
        assert mine[0]["tool"]["name"] == "Soil pH Meter"

    def test_rating_bounds(self):
        with pytest.raises(ValueError):
            ToolUsageCreate(tool_id="tool1", effectiveness_rating=6)


class TestGovernmentApiService:
    @pytest.mark.asyncio
    async def test_daily_prices_filtered(self):
        service = GovernmentApiService()

        assert len(await service.get_daily_crop_prices()) == 3
        prices = await service.get_daily_crop_prices(state="andhra", district="GUNTUR")
        assert [p["commodity"] for p in prices] == ["Cotton"]
        assert prices[0]["arrival_date"] == date.today().isoformat()

    @pytest.mark.asyncio
    async def test_sync_counts_rows(self):
        assert await GovernmentApiService().sync_price_data() == 3


class TestAdvisoryRoutes:
    def test_list_crops(self, client):
        response = client.get("/crops")
        assert response.status_code == 200
        assert len(response.json()) == 3

    def test_crop_not_found(self, client):
        assert client.get("/crops/99").status_code == 404

    def test_crop_by_id(self, client):
        assert client.get("/crops/2").json()["category"] == "cash_crops"

    def test_price_predictions(self, client):
        response = client.get("/crops/prices?crop_id=1")
        assert response.status_code == 200
        assert response.json()[0]["crop"]["name"] == "Rice"

    def test_price_change(self, client):
        response = client.get("/crops/price-change?current=2500&predicted=2750")
        assert response.json() == {"change": 250.0, "percentage": 10.0, "trend": "up"}

    def test_price_change_rejects_zero(self, client):
        assert client.get("/crops/price-change?current=0&predicted=10").status_code == 422

    def test_tool_routes(self, client):
        assert client.get("/tools/categories").json()[0] == "Irrigation"
        assert client.get("/tools/tool4").json()["name"] == "Weather Station"
        assert client.get("/tools/tool9").status_code == 404
        assert [t["id"] for t in client.get("/tools/recommended?crops=Wheat").json()] == ["tool3"]

    def test_record_usage_farmer_only(self, client, farmer_headers, labourer_headers):
        body = {"tool_id": "tool1", "effectiveness_rating": 4}

        assert client.post("/tools/usage", json=body, headers=labourer_headers).status_code == 403
        created = client.post("/tools/usage", json=body, headers=farmer_headers)
        assert created.status_code == 201

        mine = client.get("/tools/usage/me", headers=farmer_headers).json()
        assert [u["tool_id"] for u in mine] == ["tool1"]

    def test_market_routes(self, client, farmer_headers):
        assert len(client.get("/market/prices?state=telangana").json()) == 1
        assert client.get("/market/weather?location=Guntur").json()["location"] == "Guntur"
        assert client.get("/market/trends?commodity=Rice&days=7").json()["period_days"] == 7
        assert client.post("/market/sync").status_code == 401
        assert client.post("/market/sync", headers=farmer_headers).json() == {
            "status": "ok",
            "synced": 3,
        }
