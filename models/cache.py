from pydantic import BaseModel


class CacheStats(BaseModel):
    """Point-in-time snapshot of an ExpiringCache."""

    size: int
    hits: int
    misses: int
    hit_rate: str
    evictions: int = 0
