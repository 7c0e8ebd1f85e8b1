"""Mandi prices, weather and market trends.

No government or weather feed is wired in yet; these return fixed demo
figures in the shape the real feeds use.
"""

from datetime import date
from typing import Any, Optional

from ..logging_config import get_logger

logger = get_logger("agriconnect.market")

DAILY_PRICES = [
    {
        "state": "Andhra Pradesh",
        "district": "Krishna",
        "market": "Vijayawada",
        "commodity": "Rice",
        "variety": "Common",
        "min_price": 2400,
        "max_price": 2600,
        "modal_price": 2500,
    },
    {
        "state": "Telangana",
        "district": "Hyderabad",
        "market": "Hyderabad",
        "commodity": "Tomato",
        "variety": "Local",
        "min_price": 1800,
        "max_price": 2200,
        "modal_price": 2000,
    },
    {
        "state": "Andhra Pradesh",
        "district": "Guntur",
        "market": "Guntur",
        "commodity": "Cotton",
        "variety": "Medium Staple",
        "min_price": 5800,
        "max_price": 6200,
        "modal_price": 6000,
    },
]


class GovernmentApiService:
    async def get_daily_crop_prices(
        self, state: Optional[str] = None, district: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """Today's market prices, optionally narrowed by state and district substrings."""
        today = date.today().isoformat()
        prices = [{**row, "arrival_date": today} for row in DAILY_PRICES]
        if state:
            prices = [p for p in prices if state.lower() in p["state"].lower()]
        if district:
            prices = [p for p in prices if district.lower() in p["district"].lower()]
        return prices

    async def get_weather_data(self, location: str) -> dict[str, Any]:
        return {
            "location": location,
            "temperature": 28,
            "humidity": 65,
            "rainfall": 2.5,
            "weather_condition": "Partly Cloudy",
            "date": date.today().isoformat(),
        }

    async def get_market_trends(self, commodity: str, days: int = 30) -> dict[str, Any]:
        return {
            "commodity": commodity,
            "period_days": days,
            "trend": "upward",
            "price_change_percentage": 5.2,
            "average_price": 2450,
            "forecast": "Prices expected to rise due to reduced supply",
        }

    async def sync_price_data(self) -> int:
        """Pull the latest daily prices. Returns how many rows were seen."""
        try:
            prices = await self.get_daily_crop_prices()
        except Exception as e:
            logger.error(f"Error syncing price data: {e}")
            raise
        # TODO: upsert into price_predictions once the mandi feed schema is settled
        logger.info(f"Syncing price data: {len(prices)} rows")
        return len(prices)
