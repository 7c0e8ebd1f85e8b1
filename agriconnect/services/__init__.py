"""Service layer for AgriConnect.

Services are stateless wrappers over a store or Supabase client; routes and
the dashboard view-model construct them per request.
"""

from .auth_service import AuthService, DemoIdentityProvider, SupabaseIdentityProvider
from .crop_service import CropService, calculate_price_change
from .errors import (
    ApplicationNotFoundError,
    AuthenticationError,
    DuplicateApplicationError,
    InvalidTransitionError,
    JobNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ProfileNotFoundError,
    RegistrationError,
    ServiceError,
)
from .government_service import GovernmentApiService
from .job_service import JobService, filter_jobs
from .location_service import LocationService, calculate_distance
from .tool_service import ToolService

__all__ = [
    "AuthService",
    "DemoIdentityProvider",
    "SupabaseIdentityProvider",
    "CropService",
    "calculate_price_change",
    "GovernmentApiService",
    "JobService",
    "filter_jobs",
    "LocationService",
    "calculate_distance",
    "ToolService",
    "ServiceError",
    "NotFoundError",
    "JobNotFoundError",
    "ApplicationNotFoundError",
    "ProfileNotFoundError",
    "PermissionDeniedError",
    "InvalidTransitionError",
    "DuplicateApplicationError",
    "AuthenticationError",
    "RegistrationError",
]
