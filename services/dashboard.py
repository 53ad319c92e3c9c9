# services/dashboard.py

"""
Per-tenant dashboard aggregates, cached for a minute.

The payments data lives in the database; this module only sees it
through DashboardRepository.
"""

from typing import Iterable, Protocol

from core.cache import ExpiringCache, TypedCache
from core.logging_config import logger
from models.dashboard import DashboardStats

DASHBOARD_CACHE_ENTITY = "dashboard"
DASHBOARD_TTL_SECONDS = 60

UNPAID_STATUSES = ("pending", "overdue")


class DashboardRepository(Protocol):
    async def count_payments(self, tenant_id: str, statuses: Iterable[str]) -> int:
        ...

    async def sum_payments(self, tenant_id: str, statuses: Iterable[str]) -> float:
        ...


class DashboardService:
    def __init__(self, repository: DashboardRepository, cache: ExpiringCache):
        self.repository = repository
        self.stats_cache = TypedCache(
            cache, DASHBOARD_CACHE_ENTITY, DashboardStats, ttl_seconds=DASHBOARD_TTL_SECONDS
        )

    async def compute_stats(self, tenant_id: str) -> DashboardStats:
        logger.debug(f"Computing dashboard stats for tenant {tenant_id}")

        late_payments = await self.repository.count_payments(tenant_id, ["overdue"])
        total_unpaid = await self.repository.sum_payments(tenant_id, UNPAID_STATUSES)
        failed_direct_debits = await self.repository.count_payments(tenant_id, ["failed"])

        # Trends need historical snapshots, which are not stored yet
        return DashboardStats(
            late_payments=late_payments or 0,
            total_unpaid=float(total_unpaid or 0),
            failed_direct_debits=failed_direct_debits or 0,
        )

    async def get_stats(self, tenant_id: str) -> DashboardStats:
        return await self.stats_cache.get_or_compute(
            lambda: self.compute_stats(tenant_id), tenant_id, "stats"
        )

    def invalidate(self, tenant_id: str) -> int:
        """Call after payments change for a tenant."""
        return self.stats_cache.invalidate(tenant_id)
