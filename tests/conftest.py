"""
Pytest fixtures: the FastAPI app wired to an in-memory Supabase fake
"""

import os

# Must be set before app.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DEV_BYPASS_AUTH"] = "false"
os.environ.pop("SENSOR_API_KEY", None)

import uuid

import pytest
from fastapi.testclient import TestClient

from app.core.rate_limit import limiter
from app.core.security import create_token
from app.database.supabase_client import get_supabase, get_supabase_admin
from app.main import app
from app.modules.auth.service import reset_throttles
from app.modules.health.routes import get_probe_client
from tests.fake_supabase import FakeSupabase


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_supabase_admin] = lambda: fake_db
    app.dependency_overrides[get_probe_client] = lambda: fake_db
    reset_throttles()
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_throttles()


@pytest.fixture
def make_user(fake_db):
    """Insert a users row and return it"""
    def _make(role: str = "public", **values):
        defaults = {
            "id": str(uuid.uuid4()),
            "name": f"{role.title()} User",
            "email": f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            "phone": None,
            "role": role,
            "avatar_url": None,
        }
        defaults.update(values)
        return fake_db.seed("users", **defaults)
    return _make


@pytest.fixture
def auth_headers(make_user):
    """Bearer headers for a fresh user with the given role"""
    def _headers(role: str = "public", user=None):
        user = user or make_user(role)
        token = create_token(user)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_bin(fake_db):
    def _make(**values):
        defaults = {
            "name": "Bin A",
            "location": "Simpang Lima",
            "latitude": -6.9904,
            "longitude": 110.4229,
            "fill_level": 10,
            "status": "normal",
            "battery_level": 90,
            "sensor_id": None,
            "field_officer_id": None,
        }
        defaults.update(values)
        return fake_db.seed("trash_bins", **defaults)
    return _make
