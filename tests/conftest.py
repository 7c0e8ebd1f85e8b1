"""Pytest configuration and fixtures."""

import os
import secrets

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"
# Unit tests always run against the in-memory demo backend
for _var in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SECRET_KEY", "OPENCAGE_API_KEY"):
    os.environ.pop(_var, None)

from agriconnect.main import app  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def fresh_demo_state():
    """Each test starts with empty demo accounts, jobs and tool usage."""
    from agriconnect.database import reset_demo_state

    reset_demo_state()
    yield
    reset_demo_state()


def _headers(user_id: str, role: str) -> dict:
    from agriconnect.auth import create_access_token
    from agriconnect.config import get_settings

    token = create_access_token(get_settings(), user_id=user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def farmer_headers():
    """Auth headers for a test farmer."""
    return _headers("farmer_TEST_001", "farmer")


@pytest.fixture
def other_farmer_headers():
    return _headers("farmer_TEST_002", "farmer")


@pytest.fixture
def labourer_headers():
    """Auth headers for a test labourer."""
    return _headers("labourer_TEST_001", "labourer")


@pytest.fixture
def job_payload():
    return {
        "title": "Paddy harvesting",
        "description": "Need two hands to harvest five acres of paddy",
        "required_skills": ["Harvesting", "Threshing"],
        "location": "Guntur, Andhra Pradesh",
        "pay_rate": 600,
        "contact_number": "9876543210",
        "start_date": "2026-11-01",
    }
