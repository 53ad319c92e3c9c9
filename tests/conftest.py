# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Settings are read once at import time
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CACHE_SWEEP_ENABLED", "false")

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from jose import jwt
from typing import Generator

from core.cache import ExpiringCache
from core.config import settings
from main import create_app


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeDashboardRepository:
    """In-memory payments table, counting how often it is queried."""

    def __init__(self, payments=None):
        self.payments = payments or []
        self.calls = 0

    def _matching(self, tenant_id, statuses):
        statuses = set(statuses)
        return [
            p for p in self.payments
            if p["tenant_id"] == tenant_id and p["status"] in statuses
        ]

    async def count_payments(self, tenant_id, statuses):
        self.calls += 1
        return len(self._matching(tenant_id, statuses))

    async def sum_payments(self, tenant_id, statuses):
        self.calls += 1
        return sum(p["amount"] for p in self._matching(tenant_id, statuses))


def make_token(role="manager", tenant_id="tenant1", sub="user-1", expires_in=timedelta(hours=1), secret=None):
    payload = {
        "sub": sub,
        "email": f"{sub}@example.com",
        "role": role,
        "tenant_id": tenant_id,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, secret or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Fresh cache per test, driven by the fake clock."""
    cache = ExpiringCache(default_ttl_seconds=60, clock=clock)
    yield cache
    cache.stop()


@pytest.fixture
def payments():
    return [
        {"tenant_id": "tenant1", "status": "overdue", "amount": 120.0},
        {"tenant_id": "tenant1", "status": "overdue", "amount": 80.5},
        {"tenant_id": "tenant1", "status": "pending", "amount": 300.0},
        {"tenant_id": "tenant1", "status": "failed", "amount": 45.0},
        {"tenant_id": "tenant1", "status": "paid", "amount": 999.0},
        {"tenant_id": "tenant2", "status": "overdue", "amount": 10.0},
    ]


@pytest.fixture
def dashboard_repository(payments):
    return FakeDashboardRepository(payments)


@pytest.fixture(scope="function")
def app(cache, dashboard_repository):
    """Create a test FastAPI application instance."""
    return create_app(cache=cache, dashboard_repository=dashboard_repository)


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a role."""
    def _headers(role="manager", tenant_id="tenant1", **kwargs):
        return {"Authorization": f"Bearer {make_token(role=role, tenant_id=tenant_id, **kwargs)}"}
    return _headers


@pytest.fixture
def token_factory():
    """make_token as a fixture, for tests that need a raw token."""
    return make_token
