"""Crop price, smart tool, market and location routes."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from ..auth import CurrentUser
from ..database import Crops, Locations, Market, Tools
from ..logging_config import get_logger
from ..models import (
    Crop,
    FarmingTool,
    GovernmentPriceData,
    LocationData,
    MarketTrend,
    NearbyJob,
    PriceChange,
    PricePrediction,
    Profile,
    ToolUsage,
    ToolUsageCreate,
    WeatherData,
)
from ..rate_limit import limiter
from ..services import ProfileNotFoundError, calculate_distance, calculate_price_change

logger = get_logger("agriconnect.routes.advisory")

crops_router = APIRouter(prefix="/crops", tags=["crops"])
tools_router = APIRouter(prefix="/tools", tags=["tools"])
market_router = APIRouter(prefix="/market", tags=["market"])
location_router = APIRouter(prefix="/location", tags=["location"])

Latitude = Annotated[float, Query(ge=-90, le=90)]
Longitude = Annotated[float, Query(ge=-180, le=180)]


# =============================================================================
# Crops
# =============================================================================


@crops_router.get("", response_model=list[Crop])
async def list_crops(crops: Crops):
    return await crops.get_crops()


@crops_router.get("/search", response_model=list[Crop])
async def search_crops(crops: Crops, q: str = Query(..., min_length=1)):
    return await crops.search_crops(q)


@crops_router.get("/prices", response_model=list[PricePrediction])
async def list_price_predictions(
    crops: Crops,
    crop_id: str | None = None,
    location: str | None = None,
):
    """Price predictions with their crop, latest prediction date first."""
    return await crops.get_price_predictions(crop_id=crop_id, location=location)


@crops_router.get("/prices/latest", response_model=list[PricePrediction])
async def list_latest_prices(crops: Crops, crop_id: str | None = None):
    """Upcoming predictions, most confident first."""
    return await crops.get_latest_prices(crop_id=crop_id)


@crops_router.get("/price-change", response_model=PriceChange)
async def price_change(
    current: float = Query(..., gt=0),
    predicted: float = Query(..., ge=0),
):
    return calculate_price_change(current, predicted)


@crops_router.get("/{crop_id}", response_model=Crop)
async def get_crop(crop_id: str, crops: Crops):
    crop = await crops.get_crop_by_id(crop_id)
    if crop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Crop not found")
    return crop


# =============================================================================
# Smart tools
# =============================================================================


@tools_router.get("", response_model=list[FarmingTool])
async def list_tools(tools: Tools, category: str | None = None):
    return await tools.get_farming_tools(category)


@tools_router.get("/categories", response_model=list[str])
async def list_tool_categories(tools: Tools):
    return await tools.get_tool_categories()


@tools_router.get("/search", response_model=list[FarmingTool])
async def search_tools(tools: Tools, q: str = Query(..., min_length=1)):
    return await tools.search_tools(q)


@tools_router.get("/recommended", response_model=list[FarmingTool])
async def recommended_tools(tools: Tools, crops: list[str] = Query(..., min_length=1)):
    """Tools suitable for any of the given crops."""
    return await tools.get_recommended_tools(crops)


@tools_router.post("/usage", response_model=ToolUsage, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def record_tool_usage(
    request: Request,
    usage: ToolUsageCreate,
    auth: CurrentUser,
    tools: Tools,
):
    auth.require_role("farmer")
    logger.info(f"POST /tools/usage | farmer={auth.user_id} | tool={usage.tool_id}")
    return await tools.record_tool_usage(auth.user_id, usage)


@tools_router.get("/usage/me", response_model=list[ToolUsage])
async def my_tool_usage(auth: CurrentUser, tools: Tools):
    auth.require_role("farmer")
    return await tools.get_my_tool_usage(auth.user_id)


@tools_router.get("/{tool_id}", response_model=FarmingTool)
async def get_tool(tool_id: str, tools: Tools):
    tool = await tools.get_tool_by_id(tool_id)
    if tool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tool not found")
    return tool


# =============================================================================
# Market data
# =============================================================================


@market_router.get("/prices", response_model=list[GovernmentPriceData])
async def daily_prices(market: Market, state: str | None = None, district: str | None = None):
    """Today's mandi prices."""
    return await market.get_daily_crop_prices(state, district)


@market_router.get("/weather", response_model=WeatherData)
async def weather(market: Market, location: str = Query(..., min_length=1)):
    return await market.get_weather_data(location)


@market_router.get("/trends", response_model=MarketTrend)
async def market_trends(
    market: Market,
    commodity: str = Query(..., min_length=1),
    days: int = Query(30, ge=1, le=365),
):
    return await market.get_market_trends(commodity, days)


@market_router.post("/sync")
@limiter.limit("5/minute")
async def sync_prices(request: Request, auth: CurrentUser, market: Market):
    logger.info(f"POST /market/sync | user={auth.user_id}")
    synced = await market.sync_price_data()
    return {"status": "ok", "synced": synced}


# =============================================================================
# Location
# =============================================================================


@location_router.get("/reverse", response_model=LocationData)
async def reverse_geocode(
    locations: Locations,
    lat: Latitude,
    lng: Longitude,
):
    """Address for a coordinate pair."""
    return await locations.locate(lat, lng)


@location_router.get("/distance")
async def distance(
    lat1: Latitude,
    lng1: Longitude,
    lat2: Latitude,
    lng2: Longitude,
):
    return {"distance_km": calculate_distance(lat1, lng1, lat2, lng2)}


@location_router.get("/nearby-jobs", response_model=list[NearbyJob])
async def nearby_jobs(
    auth: CurrentUser,
    locations: Locations,
    lat: Latitude,
    lng: Longitude,
    radius_km: float = Query(50, gt=0, le=500),
):
    """Open jobs within ``radius_km`` of the given point, nearest first."""
    return await locations.find_nearby_jobs(lat, lng, radius_km)


@location_router.put("/me", response_model=Profile)
async def update_my_location(location: LocationData, auth: CurrentUser, locations: Locations):
    """Store a resolved location on the signed-in user's profile."""
    logger.info(f"PUT /location/me | user={auth.user_id} | city={location.city}")
    profile = await locations.update_user_location(auth.user_id, location.model_dump())
    if profile is None:
        raise ProfileNotFoundError(auth.user_id)
    return profile
