import os
import sys
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.cache import ExpiringCache
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.logging_config import logger
from core.permission_helpers import register_router

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.dashboard import router as dashboard_router
from routers.health import router as health_router
from routers.monitoring import router as monitoring_router
from services.dashboard import DashboardRepository


def build_cache() -> ExpiringCache:
    return ExpiringCache(
        default_ttl_seconds=settings.CACHE_DEFAULT_TTL_SECONDS,
        max_entries=settings.CACHE_MAX_ENTRIES or None,
    )


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app(
    cache: Optional[ExpiringCache] = None,
    dashboard_repository: Optional[DashboardRepository] = None,
) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Copro API: condominium management for syndics, owners and residents",
    )

    # One cache per application, shared by every request
    app.state.cache = cache if cache is not None else build_cache()
    app.state.dashboard_repository = dashboard_repository

    # -------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("🚀 Starting Copro API")
        validate_config_on_startup()
        if settings.CACHE_SWEEP_ENABLED:
            app.state.cache.start(settings.CACHE_SWEEP_INTERVAL_SECONDS)

    @app.on_event("shutdown")
    async def on_shutdown():
        app.state.cache.stop()
        logger.info("Copro API stopped")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Public
    register_router(app, health_router)

    # Auth
    register_router(app, auth_router)

    # Manager workspace
    register_router(app, dashboard_router)

    # Platform admin
    register_router(app, monitoring_router)

    return app


# Create the global FastAPI instance
app = create_app()
