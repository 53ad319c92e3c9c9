# routers/health.py

from fastapi import APIRouter, Depends

from core.permission_helpers import requires_zone
from core.zones import Zone

router = APIRouter(
    prefix="/health",
    tags=["Health"],
    dependencies=[Depends(requires_zone(Zone.public))],
)


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# No auth required
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    """
    Lightweight health check for load balancers or uptime monitors.
    """
    return {
        "service": "Copro API",
        "status": "ok",
    }
