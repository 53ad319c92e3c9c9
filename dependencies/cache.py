from fastapi import Request

from core.cache import ExpiringCache


def get_cache(request: Request) -> ExpiringCache:
    """The application's cache, created in main.create_app()."""
    return request.app.state.cache
