# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger

# Environments where a missing JWT secret is tolerated
RELAXED_ENVS = ("development", "test")


def validate_required_config() -> List[str]:
    """
    Validate that all required settings are usable.
    Returns list of problems.
    """
    problems = []

    if not settings.JWT_SECRET_KEY and settings.ENV not in RELAXED_ENVS:
        problems.append("JWT_SECRET_KEY")
    if settings.CACHE_DEFAULT_TTL_SECONDS <= 0:
        problems.append("CACHE_DEFAULT_TTL_SECONDS (must be positive)")
    if settings.CACHE_SWEEP_INTERVAL_SECONDS <= 0:
        problems.append("CACHE_SWEEP_INTERVAL_SECONDS (must be positive)")
    if settings.CACHE_MAX_ENTRIES < 0:
        problems.append("CACHE_MAX_ENTRIES (must be 0 or positive)")

    return problems


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    if not settings.JWT_SECRET_KEY:
        warnings.append("JWT_SECRET_KEY (every authenticated request will fail)")
    if settings.CACHE_MAX_ENTRIES == 0:
        warnings.append("CACHE_MAX_ENTRIES is 0, cache size is unbounded")

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Invalid or missing configuration: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    if missing_optional:
        for warning in missing_optional:
            logger.warning(f"Optional configuration missing: {warning}")

    logger.info("Configuration validation passed")
