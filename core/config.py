from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Copro API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # JWT / auth (tokens are issued by the identity service)
    # -------------------------------------------------
    JWT_SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # -------------------------------------------------
    # In-process cache
    # -------------------------------------------------
    CACHE_DEFAULT_TTL_SECONDS: int = Field(60, description="TTL used when a caller does not pass one")
    CACHE_SWEEP_INTERVAL_SECONDS: int = Field(300, description="How often expired entries are purged (default: 5 minutes)")
    CACHE_MAX_ENTRIES: int = Field(10000, description="LRU capacity bound; 0 disables the bound")
    CACHE_SWEEP_ENABLED: bool = True

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()
