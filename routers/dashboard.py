# routers/dashboard.py

from fastapi import APIRouter, Depends, HTTPException, Request

from dependencies.cache import get_cache
from dependencies.tenant import require_tenant_id
from core.cache import ExpiringCache
from core.permission_helpers import requires_permissions, requires_zone
from core.zones import Zone
from models.dashboard import DashboardStats
from models.enums import Permission
from services.dashboard import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(requires_zone(Zone.manage))],
)


def get_dashboard_service(
    request: Request,
    cache: ExpiringCache = Depends(get_cache),
) -> DashboardService:
    repository = getattr(request.app.state, "dashboard_repository", None)
    if repository is None:
        raise HTTPException(503, "Dashboard repository not configured")
    return DashboardService(repository, cache)


# -----------------------------------------------------
# GET /dashboard/stats
# -----------------------------------------------------
@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Payment dashboard for the caller's tenant",
    description="""
    Late payments, unpaid total and failed direct debits.

    **Caching:** Results are cached per tenant for 60 seconds.
    **Permissions:** Requires `finance:view` permission.
    **Tenant:** Platform admins select the tenant with the `X-Tenant-Id` header.
    """,
    dependencies=[Depends(requires_permissions(Permission.finance_view))],
)
async def get_stats(
    tenant_id: str = Depends(require_tenant_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.get_stats(tenant_id)


# -----------------------------------------------------
# POST /dashboard/stats/refresh
# Drops the cached aggregates and recomputes them
# -----------------------------------------------------
@router.post(
    "/stats/refresh",
    response_model=DashboardStats,
    summary="Recompute the payment dashboard",
    dependencies=[Depends(requires_permissions(Permission.finance_view, Permission.finance_update))],
)
async def refresh_stats(
    tenant_id: str = Depends(require_tenant_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    service.invalidate(tenant_id)
    return await service.get_stats(tenant_id)
