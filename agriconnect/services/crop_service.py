"""Crop catalogue and price predictions.

Reads the ``crops`` and ``price_predictions`` tables when Supabase is
configured; otherwise serves a small jittered demo dataset.
"""

import random
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from supabase import Client

from ..logging_config import get_logger

logger = get_logger("agriconnect.crops")

CROPS_TABLE = "crops"
PRICE_PREDICTIONS_TABLE = "price_predictions"

# A move within this many percent counts as stable
STABLE_BAND_PERCENT = 2

DEMO_CROPS = [
    {"id": "1", "name": "Rice", "category": "cereals"},
    {"id": "2", "name": "Cotton", "category": "cash_crops"},
    {"id": "3", "name": "Tomato", "category": "vegetables"},
]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def demo_crops() -> list[dict[str, Any]]:
    now = _now_iso()
    return [{**crop, "created_at": now} for crop in DEMO_CROPS]


def demo_price_predictions(rng: random.Random | None = None) -> list[dict[str, Any]]:
    """Tomorrow's predictions for Rice and Cotton with random jitter."""
    rng = rng or random.Random()
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    now = _now_iso()
    crops = {c["id"]: c for c in demo_crops()}
    return [
        {
            "id": "pred1",
            "crop_id": "1",
            "location": "Andhra Pradesh",
            "predicted_price": 2650 + rng.randrange(200),
            "prediction_date": tomorrow,
            "confidence_score": 0.85 + rng.random() * 0.1,
            "created_at": now,
            "crop": crops["1"],
        },
        {
            "id": "pred2",
            "crop_id": "2",
            "location": "Telangana",
            "predicted_price": 5800 + rng.randrange(400),
            "prediction_date": tomorrow,
            "confidence_score": 0.78 + rng.random() * 0.15,
            "created_at": now,
            "crop": crops["2"],
        },
    ]


def calculate_price_change(current: float, predicted: float) -> dict[str, Any]:
    """Absolute and percentage change from ``current`` to ``predicted``."""
    if current == 0:
        raise ValueError("current price must be non-zero")
    change = predicted - current
    percentage = change / current * 100

    trend = "stable"
    if abs(percentage) > STABLE_BAND_PERCENT:
        trend = "up" if percentage > 0 else "down"

    return {
        "change": round(change, 2),
        "percentage": round(percentage, 2),
        "trend": trend,
    }


class CropService:
    """Crop lookups; ``client`` is None in demo mode."""

    def __init__(self, client: Optional[Client] = None, rng: random.Random | None = None):
        self.client = client
        self.rng = rng or random.Random()

    async def get_crops(self) -> list[dict[str, Any]]:
        if self.client is None:
            return demo_crops()
        try:
            result = self.client.table(CROPS_TABLE).select("*").order("name").execute()
        except Exception as e:
            logger.error(f"Get crops error: {e}")
            raise
        return result.data or []

    async def get_crop_by_id(self, crop_id: str) -> Optional[dict[str, Any]]:
        """Crop by id, or None when missing or on error."""
        if self.client is None:
            return next((c for c in demo_crops() if c["id"] == crop_id), None)
        try:
            result = self.client.table(CROPS_TABLE).select("*").eq("id", crop_id).execute()
        except Exception as e:
            logger.error(f"Get crop by ID error: {e}")
            return None
        return result.data[0] if result.data else None

    async def get_price_predictions(
        self, crop_id: Optional[str] = None, location: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """Predictions with their crop, latest prediction date first."""
        if self.client is None:
            predictions = demo_price_predictions(self.rng)
            if crop_id:
                predictions = [p for p in predictions if p["crop_id"] == crop_id]
            if location:
                predictions = [p for p in predictions if location.lower() in p["location"].lower()]
            return predictions

        query = self.client.table(PRICE_PREDICTIONS_TABLE).select("*, crop:crops!inner(*)")
        if crop_id:
            query = query.eq("crop_id", crop_id)
        if location:
            query = query.ilike("location", f"%{location}%")
        try:
            result = query.order("prediction_date", desc=True).execute()
        except Exception as e:
            logger.error(f"Get price predictions error: {e}")
            raise
        return result.data or []

    async def get_latest_prices(self, crop_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Predictions dated today or later, most confident first."""
        today = date.today().isoformat()
        if self.client is None:
            predictions = [
                p
                for p in demo_price_predictions(self.rng)
                if p["prediction_date"] >= today and (not crop_id or p["crop_id"] == crop_id)
            ]
            return sorted(predictions, key=lambda p: p["confidence_score"], reverse=True)

        query = (
            self.client.table(PRICE_PREDICTIONS_TABLE)
            .select("*, crop:crops!inner(*)")
            .gte("prediction_date", today)
        )
        if crop_id:
            query = query.eq("crop_id", crop_id)
        try:
            result = query.order("confidence_score", desc=True).execute()
        except Exception as e:
            logger.error(f"Get latest prices error: {e}")
            raise
        return result.data or []

    async def search_crops(self, term: str) -> list[dict[str, Any]]:
        """Crops whose name or description contains ``term``."""
        term = term.strip()
        if self.client is None:
            needle = term.lower()
            return [
                c
                for c in demo_crops()
                if needle in c["name"].lower() or needle in (c.get("description") or "").lower()
            ]
        try:
            result = (
                self.client.table(CROPS_TABLE)
                .select("*")
                .or_(f"name.ilike.%{term}%,description.ilike.%{term}%")
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error(f"Search crops error: {e}")
            raise
        return result.data or []
