# core/errors.py

from fastapi import HTTPException


class CacheError(Exception):
    """Base class for cache errors."""


class InvalidCacheKeyError(CacheError, ValueError):
    """A key segment is empty or contains a reserved character (':' or '*')."""


class InvalidTTLError(CacheError, ValueError):
    """TTL must be a positive number of seconds."""


class CacheValueTypeError(CacheError, TypeError):
    """A value does not match the type bound to its cache namespace."""


def handle_cache_error(error: Exception, operation: str = "Cache operation", status_code: int = 500) -> HTTPException:
    """
    Handle cache errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to invalidate tenant")
        status_code: HTTP status code for unexpected errors (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    logger.error(f"{operation}: {error}")

    # Bad input from the caller
    if isinstance(error, (InvalidCacheKeyError, InvalidTTLError)):
        return HTTPException(status_code=400, detail=f"{operation}: {error}")

    return HTTPException(status_code=status_code, detail=f"{operation} failed")
