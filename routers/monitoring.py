# routers/monitoring.py

from fastapi import APIRouter, Depends, Request

from dependencies.cache import get_cache
from core.cache import ExpiringCache
from core.errors import CacheError, handle_cache_error
from core.logging_config import logger
from core.permission_helpers import list_route_permissions, requires_zone
from core.zones import Zone
from models.cache import CacheStats

router = APIRouter(
    prefix="/monitoring",
    tags=["Monitoring"],
    dependencies=[Depends(requires_zone(Zone.admin))],
)


# -----------------------------------------------------
# GET /monitoring/cache
# -----------------------------------------------------
@router.get("/cache", response_model=CacheStats, summary="Cache statistics")
def get_cache_stats(cache: ExpiringCache = Depends(get_cache)):
    return cache.get_stats()


# -----------------------------------------------------
# POST /monitoring/cache/clear
# -----------------------------------------------------
@router.post("/cache/clear", summary="Clear the whole cache")
def clear_cache(cache: ExpiringCache = Depends(get_cache)):
    cache.clear()
    return {"success": True, "message": "Cache cleared"}


# -----------------------------------------------------
# POST /monitoring/cache/tenants/{tenant_id}/invalidate
# -----------------------------------------------------
@router.post(
    "/cache/tenants/{tenant_id}/invalidate",
    summary="Drop every cache entry of one tenant",
)
def invalidate_tenant_cache(tenant_id: str, cache: ExpiringCache = Depends(get_cache)):
    try:
        invalidated = cache.invalidate_tenant(tenant_id)
    except CacheError as e:
        raise handle_cache_error(e, "Failed to invalidate tenant cache")

    logger.info(f"Invalidated {invalidated} cache entries for tenant {tenant_id}")
    return {"success": True, "invalidated": invalidated}


# -----------------------------------------------------
# GET /monitoring/routes
# Permissions declared on every guarded route
# -----------------------------------------------------
@router.get("/routes", summary="Route permission table")
def get_route_permissions(request: Request):
    return list_route_permissions(request.app)
