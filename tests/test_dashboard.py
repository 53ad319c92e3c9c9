# tests/test_dashboard.py

"""
Tests for the cached dashboard endpoint and service.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.dashboard import DashboardService


def test_stats_success(client: TestClient, auth_headers):
    response = client.get("/dashboard/stats", headers=auth_headers("manager"))

    assert response.status_code == 200
    data = response.json()
    assert data["late_payments"] == 2
    assert data["total_unpaid"] == 500.5
    assert data["failed_direct_debits"] == 1
    assert data["late_payments_trend"] == 0


def test_stats_are_cached_per_tenant(client: TestClient, auth_headers, dashboard_repository, cache):
    client.get("/dashboard/stats", headers=auth_headers("manager"))
    calls_after_first = dashboard_repository.calls
    client.get("/dashboard/stats", headers=auth_headers("admin"))

    assert dashboard_repository.calls == calls_after_first
    assert cache.has("dashboard:tenant1:stats")

    other = client.get("/dashboard/stats", headers=auth_headers("manager", tenant_id="tenant2"))
    assert other.json()["late_payments"] == 1
    assert dashboard_repository.calls == calls_after_first * 2


def test_stats_recomputed_after_tenant_invalidation(client: TestClient, auth_headers, dashboard_repository, payments, cache):
    client.get("/dashboard/stats", headers=auth_headers("manager"))

    payments.append({"tenant_id": "tenant1", "status": "overdue", "amount": 1.0})
    cache.invalidate_tenant("tenant1")

    response = client.get("/dashboard/stats", headers=auth_headers("manager"))
    assert response.json()["late_payments"] == 3


def test_refresh_requires_finance_update(client: TestClient, auth_headers):
    response = client.post("/dashboard/stats/refresh", headers=auth_headers("manager"))
    assert response.status_code == 200

    # council holds finance:view but is outside the manager zone
    response = client.post("/dashboard/stats/refresh", headers=auth_headers("council"))
    assert response.status_code == 403


def test_refresh_recomputes(client: TestClient, auth_headers, payments):
    client.get("/dashboard/stats", headers=auth_headers("manager"))
    payments.append({"tenant_id": "tenant1", "status": "failed", "amount": 5.0})

    response = client.post("/dashboard/stats/refresh", headers=auth_headers("manager"))

    assert response.json()["failed_direct_debits"] == 2


@pytest.mark.parametrize("role", ["tenant", "owner", "council"])
def test_portal_roles_are_refused(client: TestClient, auth_headers, role):
    response = client.get("/dashboard/stats", headers=auth_headers(role))

    assert response.status_code == 403


def test_platform_admin_selects_tenant_with_header(client: TestClient, auth_headers):
    headers = auth_headers("platform_admin", tenant_id=None)
    headers["X-Tenant-Id"] = "tenant2"

    response = client.get("/dashboard/stats", headers=headers)

    assert response.status_code == 200
    assert response.json()["late_payments"] == 1


def test_platform_admin_without_header(client: TestClient, auth_headers):
    response = client.get("/dashboard/stats", headers=auth_headers("platform_admin", tenant_id=None))

    assert response.status_code == 400
    assert response.json()["detail"] == "Tenant context required: send the X-Tenant-Id header"


def test_platform_admin_with_invalid_header(client: TestClient, auth_headers):
    headers = auth_headers("platform_admin", tenant_id=None)
    headers["X-Tenant-Id"] = "tenant1:*"

    response = client.get("/dashboard/stats", headers=headers)

    assert response.status_code == 400


def test_manager_without_tenant_is_forbidden(client: TestClient, auth_headers):
    response = client.get("/dashboard/stats", headers=auth_headers("manager", tenant_id=None))

    assert response.status_code == 403
    assert response.json()["detail"] == "Tenant context is required for this operation"


def test_header_is_ignored_for_regular_users(client: TestClient, auth_headers):
    headers = auth_headers("manager", tenant_id="tenant1")
    headers["X-Tenant-Id"] = "tenant2"

    response = client.get("/dashboard/stats", headers=headers)

    assert response.json()["late_payments"] == 2


def test_missing_repository(cache, auth_headers):
    app = create_app(cache=cache)
    with TestClient(app) as client:
        response = client.get("/dashboard/stats", headers=auth_headers("manager"))

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_service_invalidate(cache, dashboard_repository):
    service = DashboardService(dashboard_repository, cache)

    await service.get_stats("tenant1")
    await service.get_stats("tenant2")

    assert service.invalidate("tenant1") == 1
    assert not cache.has("dashboard:tenant1:stats")
    assert cache.has("dashboard:tenant2:stats")
