"""Pydantic models for API requests and responses."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Role = Literal["farmer", "labourer"]
JobStatus = Literal["open", "in_progress", "completed", "cancelled"]
ApplicationStatus = Literal["pending", "accepted", "rejected"]
ApplicationDecision = Literal["accepted", "rejected"]
CropCategory = Literal["cereals", "pulses", "vegetables", "fruits", "spices", "cash_crops"]


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# =============================================================================
# Auth Models
# =============================================================================

class SignUpRequest(BaseModel):
    """Request to create an account."""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=120)
    role: Role
    phone: str | None = None
    location: str | None = None

    @field_validator("email", "full_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("must be an email address")
        return v.lower()


class SignInRequest(BaseModel):
    """Request to sign in with email and password."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _require_text(v).lower()


class AuthUser(BaseModel):
    """The signed-in identity."""
    id: str
    email: str | None = None
    full_name: str | None = None
    role: Role = "farmer"


class SessionResponse(BaseModel):
    """Access token issued after sign-up or sign-in."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthUser


# =============================================================================
# Profile Models
# =============================================================================

class Profile(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    role: Role
    location: str | None = None
    avatar_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Editable profile fields; unset fields are left unchanged."""
    full_name: str | None = Field(None, min_length=1, max_length=120)
    phone: str | None = None
    location: str | None = None
    avatar_url: str | None = None


class CurrentUserResponse(BaseModel):
    user: AuthUser
    profile: Profile | None = None


class FarmerSummary(BaseModel):
    """Farmer row merged with its profile."""
    id: str
    full_name: str | None = None
    email: str | None = None
    location: str | None = None
    farm_size: float | None = None
    farm_location: str | None = None
    primary_crops: list[str] | None = None
    experience_years: int | None = None
    verified: bool | None = None
    rating: float | None = None
    total_jobs_posted: int | None = None


class LabourerSummary(BaseModel):
    """Labourer row merged with its profile."""
    id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    skills: list[str] | None = None
    experience_years: int | None = None
    hourly_rate: float | None = None
    availability: bool | None = None
    rating: float | None = None
    total_jobs_completed: int | None = None


# =============================================================================
# Job Models
# =============================================================================

class JobCreate(BaseModel):
    """Request to post a job."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    required_skills: list[str] = Field(default_factory=list)
    location: str = Field(..., min_length=1)
    pay_rate: float = Field(..., gt=0)
    contact_number: str = Field(..., min_length=1)
    start_date: date | None = None

    @field_validator("title", "description", "location", "contact_number")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("required_skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        seen = []
        for skill in (s.strip() for s in v):
            if skill and skill not in seen:
                seen.append(skill)
        return seen


class JobPosting(BaseModel):
    id: str
    farmer_id: str
    title: str
    description: str
    required_skills: list[str] = Field(default_factory=list)
    location: str
    pay_rate: float
    contact_number: str | None = None
    status: JobStatus
    start_date: date | None = None
    created_at: datetime

    @field_validator("required_skills", mode="before")
    @classmethod
    def null_skills(cls, v):
        return v or []

    @field_validator("start_date", mode="before")
    @classmethod
    def empty_start_date(cls, v):
        return v or None


class JobWithFarmer(JobPosting):
    farmer: FarmerSummary | None = None


class JobListResponse(BaseModel):
    jobs: list[JobWithFarmer]
    total: int
    limit: int
    offset: int


class JobStatusUpdate(BaseModel):
    status: JobStatus


class ApplicationCreate(BaseModel):
    """Request to apply for a job."""
    message: str | None = Field(None, max_length=2000)
    proposed_rate: float | None = Field(None, gt=0)


class JobApplication(BaseModel):
    id: str
    job_id: str
    labourer_id: str
    message: str | None = None
    proposed_rate: float | None = None
    status: ApplicationStatus
    applied_at: datetime


class ApplicationWithLabourer(JobApplication):
    labourer: LabourerSummary | None = None


class ApplicationWithJob(JobApplication):
    job: JobWithFarmer | None = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationDecision


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationWithLabourer]
    total: int


class MyApplicationListResponse(BaseModel):
    applications: list[ApplicationWithJob]
    total: int


# =============================================================================
# Advisory Models
# =============================================================================

class Crop(BaseModel):
    id: str
    name: str
    category: CropCategory
    description: str | None = None
    created_at: datetime | None = None


class PricePrediction(BaseModel):
    id: str
    crop_id: str
    location: str
    predicted_price: float
    prediction_date: date
    confidence_score: float
    created_at: datetime | None = None
    crop: Crop | None = None


class PriceChange(BaseModel):
    change: float
    percentage: float
    trend: Literal["up", "down", "stable"]


class FarmingTool(BaseModel):
    id: str
    name: str
    category: str
    description: str
    benefits: list[str] | None = None
    suitable_crops: list[str] | None = None
    cost_estimate: float | None = None
    usage_count: int = 0
    avg_rating: float = 0
    created_at: datetime | None = None


class ToolUsageCreate(BaseModel):
    tool_id: str = Field(..., min_length=1)
    usage_date: date | None = None
    notes: str | None = None
    effectiveness_rating: int | None = Field(None, ge=1, le=5)


class ToolUsage(BaseModel):
    id: str
    farmer_id: str
    tool_id: str
    usage_date: date | None = None
    notes: str | None = None
    effectiveness_rating: int | None = None
    created_at: datetime | None = None
    tool: FarmingTool | None = None


class GovernmentPriceData(BaseModel):
    state: str
    district: str
    market: str
    commodity: str
    variety: str
    arrival_date: date
    min_price: float
    max_price: float
    modal_price: float


class WeatherData(BaseModel):
    location: str
    temperature: float
    humidity: float
    rainfall: float
    weather_condition: str
    date: date


class MarketTrend(BaseModel):
    commodity: str
    period_days: int
    trend: str
    price_change_percentage: float
    average_price: float
    forecast: str


class LocationData(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str
    city: str
    state: str
    pincode: str


class NearbyJob(JobWithFarmer):
    distance: float


# =============================================================================
# Dashboard Models
# =============================================================================

class DashboardStats(BaseModel):
    jobs_posted: int = 0
    pending_applications: int = 0
    available_jobs: int = 0
    applications_sent: int = 0
    price_alerts: int = 0
    tools_available: int = 0


class DashboardSnapshot(BaseModel):
    """Everything one dashboard render needs."""
    role: Role
    user_id: str
    stats: DashboardStats
    jobs: list[JobWithFarmer]
    my_jobs: list[JobPosting] = []
    applications: list[dict[str, Any]] = []
    my_applications: list[ApplicationWithJob] = []
    recent_activity: list[dict[str, Any]] = []
    crop_prices: list[PricePrediction] = []
    smart_tools: list[FarmingTool] = []
    error: str | None = None
