"""Reverse geocoding, distances and nearby-job search."""

import math
import random
from typing import Any, Optional

import httpx

from ..config import Settings
from ..logging_config import get_logger
from ..storage import MarketplaceStore, utc_now_iso

logger = get_logger("agriconnect.location")

OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"
EARTH_RADIUS_KM = 6371
DEFAULT_RADIUS_KM = 50
# Demo job coordinates are scattered up to this many degrees around the user
JOB_JITTER_DEGREES = 0.5

FALLBACK_ADDRESS = {
    "address": "Agricultural Area, Rural Location",
    "city": "Vijayawada",
    "state": "Andhra Pradesh",
    "pincode": "520001",
}


class GeocodingError(Exception):
    """Raised when the geocoding service gives no usable answer."""


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres, rounded to 2 decimals."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


def parse_opencage_result(data: dict[str, Any]) -> dict[str, str]:
    results = data.get("results") or []
    if not results:
        raise GeocodingError("No results found")
    result = results[0]
    components = result.get("components") or {}
    return {
        "address": result.get("formatted", "Unknown"),
        "city": (
            components.get("city")
            or components.get("town")
            or components.get("village")
            or "Unknown"
        ),
        "state": components.get("state") or "Unknown",
        "pincode": components.get("postcode") or "Unknown",
    }


class LocationService:
    def __init__(
        self,
        store: MarketplaceStore,
        settings: Settings,
        rng: random.Random | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.settings = settings
        self.rng = rng or random.Random()
        self._transport = transport

    async def reverse_geocode(self, lat: float, lng: float) -> dict[str, str]:
        """Address for a coordinate pair; falls back to a fixed rural address on any failure."""
        try:
            if not self.settings.opencage_api_key:
                raise GeocodingError("OPENCAGE_API_KEY is not set")
            async with httpx.AsyncClient(
                timeout=self.settings.geocode_timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    OPENCAGE_URL,
                    params={"q": f"{lat}+{lng}", "key": self.settings.opencage_api_key},
                )
            if response.status_code != 200:
                raise GeocodingError(f"Geocoding failed with status {response.status_code}")
            return parse_opencage_result(response.json())
        except (GeocodingError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocoding error: {e}")
            return dict(FALLBACK_ADDRESS)

    async def locate(self, lat: float, lng: float) -> dict[str, Any]:
        return {"latitude": lat, "longitude": lng, **await self.reverse_geocode(lat, lng)}

    def _mock_job_position(self, lat: float, lng: float) -> tuple[float, float]:
        # Jobs carry no coordinates yet; place them randomly near the user.
        return (
            lat + (self.rng.random() - 0.5) * JOB_JITTER_DEGREES,
            lng + (self.rng.random() - 0.5) * JOB_JITTER_DEGREES,
        )

    async def find_nearby_jobs(
        self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM
    ) -> list[dict[str, Any]]:
        """Open jobs within ``radius_km``, nearest first, each with a ``distance``."""
        try:
            jobs = await self.store.list_jobs(status="open")
        except Exception as e:
            logger.error(f"Error finding nearby jobs: {e}")
            raise

        nearby = []
        for job in jobs:
            job_lat, job_lng = self._mock_job_position(lat, lng)
            distance = calculate_distance(lat, lng, job_lat, job_lng)
            if distance <= radius_km:
                nearby.append({**job, "distance": distance})
        nearby.sort(key=lambda j: j["distance"])
        return nearby

    async def update_user_location(self, user_id: str, location: dict[str, Any]) -> Optional[dict]:
        updates = {
            "location": f"{location['city']}, {location['state']}",
            "latitude": location["latitude"],
            "longitude": location["longitude"],
            "updated_at": utc_now_iso(),
        }
        try:
            return await self.store.update_profile(user_id, updates)
        except Exception as e:
            logger.error(f"Error updating user location: {e}")
            raise
