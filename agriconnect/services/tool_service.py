"""Smart farming tool catalogue and usage tracking."""

import random
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from supabase import Client

from ..logging_config import get_logger
from ..models import ToolUsageCreate

logger = get_logger("agriconnect.tools")

FARMING_TOOLS_TABLE = "farming_tools"
TOOL_USAGE_TABLE = "tool_usage"
TOOL_WITH_RATINGS_SELECT = "*, tool_usage(effectiveness_rating)"


def with_usage_stats(tool: dict[str, Any]) -> dict[str, Any]:
    """Replace the embedded ``tool_usage`` rows with ``usage_count`` and ``avg_rating``."""
    usages = tool.get("tool_usage") or []
    ratings = [u["effectiveness_rating"] for u in usages if u.get("effectiveness_rating") is not None]
    stats = {k: v for k, v in tool.items() if k != "tool_usage"}
    stats["usage_count"] = len(usages)
    stats["avg_rating"] = round(sum(ratings) / len(ratings), 1) if ratings else 0
    return stats


def demo_tools(rng: random.Random | None = None) -> list[dict[str, Any]]:
    rng = rng or random.Random()
    now = datetime.now(timezone.utc).isoformat()
    return [
        {
            "id": "tool1",
            "name": "Smart Irrigation System",
            "category": "Irrigation",
            "description": "Automated drip irrigation system with IoT sensors for optimal water management",
            "benefits": ["Water conservation", "Automated watering", "Crop monitoring", "Remote control"],
            "suitable_crops": ["Rice", "Cotton", "Vegetables", "Fruits"],
            "created_at": now,
            "usage_count": 45 + rng.randrange(20),
            "avg_rating": 4.3 + rng.random() * 0.4,
            "cost_estimate": 25000,
        },
        {
            "id": "tool2",
            "name": "Soil pH Meter",
            "category": "Testing",
            "description": "Digital soil pH and moisture meter with instant readings",
            "benefits": ["Accurate pH measurement", "Moisture detection", "Portable design", "Easy to use"],
            "suitable_crops": ["All crops"],
            "created_at": now,
            "usage_count": 128 + rng.randrange(30),
            "avg_rating": 4.7 + rng.random() * 0.2,
            "cost_estimate": 2500,
        },
        {
            "id": "tool3",
            "name": "Drone Crop Sprayer",
            "category": "Spraying",
            "description": "Autonomous drone for precise pesticide and fertilizer application",
            "benefits": ["Precision spraying", "Time saving", "Reduced chemical waste", "GPS guided"],
            "suitable_crops": ["Cotton", "Rice", "Sugarcane", "Wheat"],
            "created_at": now,
            "usage_count": 23 + rng.randrange(15),
            "avg_rating": 4.1 + rng.random() * 0.6,
            "cost_estimate": 150000,
        },
        {
            "id": "tool4",
            "name": "Weather Station",
            "category": "Monitoring",
            "description": "Comprehensive weather monitoring system with mobile alerts",
            "benefits": ["Real-time weather data", "Mobile notifications", "Historical data", "Forecast alerts"],
            "suitable_crops": ["All crops"],
            "created_at": now,
            "usage_count": 67 + rng.randrange(25),
            "avg_rating": 4.5 + rng.random() * 0.3,
            "cost_estimate": 35000,
        },
    ]


class ToolService:
    """Tool lookups; ``client`` is None in demo mode.

    In demo mode usage records go to ``usage_log``, a list shared for the
    lifetime of the process.
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        usage_log: Optional[list[dict[str, Any]]] = None,
        rng: random.Random | None = None,
    ):
        self.client = client
        self.usage_log = usage_log if usage_log is not None else []
        self.rng = rng or random.Random()

    async def get_farming_tools(self, category: Optional[str] = None) -> list[dict[str, Any]]:
        if self.client is None:
            tools = demo_tools(self.rng)
            if category:
                tools = [t for t in tools if t["category"] == category]
            return tools

        query = self.client.table(FARMING_TOOLS_TABLE).select(TOOL_WITH_RATINGS_SELECT)
        if category:
            query = query.eq("category", category)
        try:
            result = query.order("name").execute()
        except Exception as e:
            logger.error(f"Get farming tools error: {e}")
            raise
        return [with_usage_stats(t) for t in result.data or []]

    async def get_tool_by_id(self, tool_id: str) -> Optional[dict[str, Any]]:
        """Tool by id, or None when missing or on error."""
        if self.client is None:
            return next((t for t in demo_tools(self.rng) if t["id"] == tool_id), None)
        try:
            result = (
                self.client.table(FARMING_TOOLS_TABLE)
                .select(TOOL_WITH_RATINGS_SELECT)
                .eq("id", tool_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Get tool by ID error: {e}")
            return None
        return with_usage_stats(result.data[0]) if result.data else None

    async def get_tool_categories(self) -> list[str]:
        """Distinct categories, sorted."""
        if self.client is None:
            rows = demo_tools(self.rng)
        else:
            try:
                rows = (
                    self.client.table(FARMING_TOOLS_TABLE)
                    .select("category")
                    .order("category")
                    .execute()
                ).data or []
            except Exception as e:
                logger.error(f"Get tool categories error: {e}")
                raise
        return sorted({row["category"] for row in rows})

    async def record_tool_usage(self, farmer_id: str, usage: ToolUsageCreate) -> dict[str, Any]:
        row = {"farmer_id": farmer_id, **usage.model_dump(mode="json", exclude_none=True)}
        if self.client is None:
            record = {
                "id": f"usage-{uuid.uuid4().hex[:8]}",
                "usage_date": date.today().isoformat(),
                **row,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            self.usage_log.append(record)
            return record
        try:
            result = self.client.table(TOOL_USAGE_TABLE).insert(row).execute()
        except Exception as e:
            logger.error(f"Record tool usage error: {e}")
            raise
        return result.data[0] if result.data else row

    async def get_my_tool_usage(self, farmer_id: str) -> list[dict[str, Any]]:
        """A farmer's usage records with their tool, latest usage first."""
        if self.client is None:
            tools = {t["id"]: t for t in demo_tools(self.rng)}
            records = [
                {**u, "tool": tools.get(u["tool_id"])}
                for u in self.usage_log
                if u["farmer_id"] == farmer_id
            ]
            return sorted(records, key=lambda u: u["usage_date"], reverse=True)
        try:
            result = (
                self.client.table(TOOL_USAGE_TABLE)
                .select("*, tool:farming_tools!inner(*)")
                .eq("farmer_id", farmer_id)
                .order("usage_date", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Get my tool usage error: {e}")
            raise
        return result.data or []

    async def search_tools(self, term: str) -> list[dict[str, Any]]:
        """Tools whose name, description or category contains ``term``."""
        term = term.strip()
        if self.client is None:
            needle = term.lower()
            return [
                t
                for t in demo_tools(self.rng)
                if any(needle in t[field].lower() for field in ("name", "description", "category"))
            ]
        try:
            result = (
                self.client.table(FARMING_TOOLS_TABLE)
                .select(TOOL_WITH_RATINGS_SELECT)
                .or_(
                    f"name.ilike.%{term}%,description.ilike.%{term}%,category.ilike.%{term}%"
                )
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error(f"Search tools error: {e}")
            raise
        return [with_usage_stats(t) for t in result.data or []]

    async def get_recommended_tools(self, crops: list[str]) -> list[dict[str, Any]]:
        """Tools suitable for any of ``crops``."""
        if self.client is None:
            wanted = set(crops)
            return [t for t in demo_tools(self.rng) if wanted & set(t["suitable_crops"])]
        try:
            result = (
                self.client.table(FARMING_TOOLS_TABLE)
                .select(TOOL_WITH_RATINGS_SELECT)
                .overlaps("suitable_crops", crops)
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error(f"Get recommended tools error: {e}")
            raise
        return [with_usage_stats(t) for t in result.data or []]
