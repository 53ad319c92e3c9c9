# core/cache.py

"""
In-memory caching with TTL, pattern invalidation and tenant scoping.

Keys follow the "entity:tenantId:identifier..." convention. CacheKey
builds and validates them, and the tenant of every entry is recorded
when it is written so tenant invalidation does not depend on globbing.

The cache lives in a single process; it is not shared between workers
and does not survive a restart.
"""

import asyncio
import inspect
import re
import time
from collections import OrderedDict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Tuple, Type, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from core.errors import CacheValueTypeError, InvalidCacheKeyError, InvalidTTLError
from core.logging_config import logger
from core.scheduler import start_cache_sweeper
from models.cache import CacheStats

T = TypeVar("T")

KEY_SEPARATOR = ":"
WILDCARD = "*"
DEFAULT_TTL_SECONDS = 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60


def _check_segment(name: str, value, allow_empty: bool = False) -> str:
    """Return value as a key segment, rejecting reserved characters."""
    if value is None:
        raise InvalidCacheKeyError(f"Cache key {name} must not be None")

    segment = str(value)
    if not segment and not allow_empty:
        raise InvalidCacheKeyError(f"Cache key {name} must not be empty")
    if KEY_SEPARATOR in segment or WILDCARD in segment:
        raise InvalidCacheKeyError(
            f"Cache key {name} {segment!r} must not contain '{KEY_SEPARATOR}' or '{WILDCARD}'"
        )
    return segment


def _tenant_of(key: str) -> Optional[str]:
    """
    Tenant segment of a plain "entity:tenantId[:rest]" key, if it has one.
    Matches what CacheKey records for the same string.
    """
    segments = key.split(KEY_SEPARATOR)
    if len(segments) < 2 or not segments[0] or not segments[1]:
        return None
    return segments[1]


def _format_hit_rate(hits: int, total: int) -> str:
    """Percentage with one decimal, ties rounded up ("0.25" -> "0.3%")."""
    if total == 0:
        return "0%"
    # Decimal(float) is exact, so ties are decided on the real binary value
    rate = Decimal((hits / total) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{rate}%"


def _pattern_to_regex(pattern: str) -> "re.Pattern[str]":
    """'*' matches any run of characters; everything else is literal."""
    return re.compile(".*".join(re.escape(chunk) for chunk in pattern.split(WILDCARD)))


@dataclass(frozen=True)
class CacheKey:
    """
    Structured cache key: entity, owning tenant, then free-form parts.

    str(CacheKey("dashboard", "t1", ("stats",))) == "dashboard:t1:stats"
    """

    entity: str
    tenant_id: str
    parts: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "entity", _check_segment("entity", self.entity))
        object.__setattr__(self, "tenant_id", _check_segment("tenant_id", self.tenant_id))
        object.__setattr__(
            self, "parts", tuple(_check_segment("part", p, allow_empty=True) for p in self.parts)
        )

    @classmethod
    def of(cls, entity, tenant_id, *parts) -> "CacheKey":
        return cls(entity, tenant_id, tuple(parts))

    def __str__(self):
        return KEY_SEPARATOR.join((self.entity, self.tenant_id) + self.parts)


class CacheEntry:
    """Represents a cached value with expiration time."""

    def __init__(self, value: Any, expires_at: float, tenant_id: Optional[str] = None):
        self.value = value
        self.expires_at = expires_at
        self.tenant_id = tenant_id

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        return now > self.expires_at


CacheKeyLike = Union[str, CacheKey]


class ExpiringCache:
    """
    In-memory cache with per-entry TTL.

    - expired entries are dropped when read and by a periodic sweep
    - optional LRU bound (max_entries)
    - wildcard and tenant invalidation
    - hit/miss statistics
    - get_or_compute with one in-flight computation per key

    Thread-safe for concurrent access; the sweep runs on a scheduler thread.

    Example:
        cache = ExpiringCache(default_ttl_seconds=60)
        cache.set("dashboard:tenant1:stats", stats)
        cache.get("dashboard:tenant1:stats")
        cache.invalidate_pattern("dashboard:tenant1:*")
        cache.invalidate_tenant("tenant1")
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if default_ttl_seconds <= 0:
            raise InvalidTTLError(f"default_ttl_seconds must be positive, got {default_ttl_seconds}")
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")

        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._in_flight: Dict[str, asyncio.Future] = {}
        self._scheduler = None

    # -----------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------
    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self, sweep_interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS):
        """Start the background sweep. Calling it twice is a no-op."""
        if self._scheduler is not None:
            return
        self._scheduler = start_cache_sweeper(self.cleanup_expired, sweep_interval_seconds)

    def stop(self):
        """Stop the background sweep and drop every entry."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        self.clear()

    # -----------------------------------------------------
    # Single-key operations
    # -----------------------------------------------------
    def _ttl(self, ttl_seconds: Optional[float]) -> float:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise InvalidTTLError(f"ttl_seconds must be positive, got {ttl}")
        return ttl

    def get(self, key: CacheKeyLike) -> Optional[Any]:
        """
        Get a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found or expired
        """
        cache_key = str(key)
        with self._lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._cache[cache_key]
                self._misses += 1
                return None

            self._cache.move_to_end(cache_key)
            self._hits += 1
            return entry.value

    def set(self, key: CacheKeyLike, value: Any, ttl_seconds: Optional[float] = None):
        """
        Set a value in the cache with TTL, replacing any existing entry.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Time to live in seconds (default: the cache's default TTL)

        Raises:
            InvalidTTLError: ttl_seconds is zero or negative; nothing is stored.
        """
        ttl = self._ttl(ttl_seconds)
        if isinstance(key, CacheKey):
            cache_key, tenant_id = str(key), key.tenant_id
        else:
            cache_key, tenant_id = key, _tenant_of(key)

        with self._lock:
            self._cache[cache_key] = CacheEntry(value, self._clock() + ttl, tenant_id)
            self._cache.move_to_end(cache_key)

            if self.max_entries is not None:
                while len(self._cache) > self.max_entries:
                    evicted_key, _ = self._cache.popitem(last=False)
                    self._evictions += 1
                    logger.debug(f"Evicted least recently used cache entry {evicted_key!r}")

    def has(self, key: CacheKeyLike) -> bool:
        """Check if a key exists and is not expired. Does not count as a read."""
        cache_key = str(key)
        with self._lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                return False

            if entry.is_expired(self._clock()):
                del self._cache[cache_key]
                return False

            return True

    def delete(self, key: CacheKeyLike) -> bool:
        """Delete a key. Returns whether it existed."""
        with self._lock:
            return self._cache.pop(str(key), None) is not None

    # -----------------------------------------------------
    # Multi-key operations
    # -----------------------------------------------------
    def _remove_where(self, predicate: Callable[[str, CacheEntry], bool]) -> int:
        with self._lock:
            doomed = [key for key, entry in self._cache.items() if predicate(key, entry)]
            for key in doomed:
                del self._cache[key]
        return len(doomed)

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Invalidate all keys matching a pattern.
        "*" matches any characters.

        Example:
            cache.invalidate_pattern("dashboard:tenant1:*")  # all dashboard cache for tenant1
            cache.invalidate_pattern("owners:*")             # all owners cache
        """
        regex = _pattern_to_regex(pattern)
        count = self._remove_where(lambda key, entry: regex.fullmatch(key) is not None)

        if count > 0:
            logger.debug(f'Invalidated {count} cache entries matching "{pattern}"')

        return count

    def invalidate_tenant(self, tenant_id: str) -> int:
        """
        Invalidate every entry written for a tenant: CacheKeys with that
        tenant_id and string keys whose second segment is that tenant
        ("owners:t1" as well as "owners:t1:42").
        """
        tenant = _check_segment("tenant_id", tenant_id)
        count = self._remove_where(lambda key, entry: entry.tenant_id == tenant)

        if count > 0:
            logger.debug(f"Invalidated {count} cache entries for tenant {tenant!r}")

        return count

    def cleanup_expired(self) -> int:
        """Remove all expired entries from the cache."""
        now = self._clock()
        cleaned = self._remove_where(lambda key, entry: entry.is_expired(now))

        if cleaned > 0:
            logger.debug(f"Cleaned up {cleaned} expired cache entries")

        return cleaned

    def clear(self):
        """Clear all cache entries. Statistics are kept."""
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
        logger.info(f"Cleared all {size} cache entries")

    # -----------------------------------------------------
    # Statistics
    # -----------------------------------------------------
    def get_stats(self) -> CacheStats:
        with self._lock:
            size = len(self._cache)
            hits, misses, evictions = self._hits, self._misses, self._evictions

        return CacheStats(
            size=size,
            hits=hits,
            misses=misses,
            hit_rate=_format_hit_rate(hits, hits + misses),
            evictions=evictions,
        )

    def reset_stats(self):
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    # -----------------------------------------------------
    # Get or compute
    # -----------------------------------------------------
    async def get_or_compute(
        self,
        key: CacheKeyLike,
        compute: Callable[[], Union[T, Awaitable[T]]],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        """
        Return the cached value, or compute, cache and return it.

        Concurrent misses on the same key share one call to `compute`.
        When `compute` raises nothing is stored and every waiter gets
        the exception; the next call computes again.

        Example:
            stats = await cache.get_or_compute(
                "dashboard:tenant1:stats",
                lambda: repository.compute_stats("tenant1"),
                60,
            )
        """
        ttl = self._ttl(ttl_seconds)

        cached = self.get(key)
        if cached is not None:
            return cached

        cache_key = str(key)
        pending = self._in_flight.get(cache_key)
        if pending is not None:
            # shield: a cancelled follower must not cancel the shared computation
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[cache_key] = future
        try:
            value = compute()
            if inspect.isawaitable(value):
                value = await value
            self.set(key, value, ttl)
            future.set_result(value)
            return value
        except Exception as exc:
            future.set_exception(exc)
            # Mark as retrieved; there may be no follower to await it
            future.exception()
            raise
        finally:
            self._in_flight.pop(cache_key, None)
            if not future.done():
                future.cancel()

    # -----------------------------------------------------
    # Keys
    # -----------------------------------------------------
    @staticmethod
    def build_key(entity: str, tenant_id: str, *parts: Union[str, int]) -> str:
        """Build an "entity:tenantId:part..." key. Raises InvalidCacheKeyError."""
        return str(CacheKey.of(entity, tenant_id, *parts))


class TypedCache(Generic[T]):
    """
    Typed view over an ExpiringCache for one entity prefix.

    Values are validated against `value_type` with pydantic when written,
    and again when read; an entry of the wrong shape is dropped and
    reported as a miss.

    Example:
        stats_cache = TypedCache(cache, "dashboard", DashboardStats, ttl_seconds=60)
        stats_cache.set(stats, "tenant1", "stats")
        stats_cache.get("tenant1", "stats")  # DashboardStats or None
    """

    def __init__(
        self,
        cache: ExpiringCache,
        entity: str,
        value_type: Type[T],
        ttl_seconds: Optional[float] = None,
    ):
        self.cache = cache
        self.entity = _check_segment("entity", entity)
        self.value_type = value_type
        self.ttl_seconds = ttl_seconds
        self._adapter = TypeAdapter(value_type)

    def key(self, tenant_id: str, *parts: Union[str, int]) -> CacheKey:
        return CacheKey.of(self.entity, tenant_id, *parts)

    def _validate(self, value: Any) -> T:
        try:
            return self._adapter.validate_python(value)
        except ValidationError as e:
            type_name = getattr(self.value_type, "__name__", repr(self.value_type))
            raise CacheValueTypeError(
                f"Value for '{self.entity}' is not a valid {type_name}: {e}"
            ) from e

    def _checked(self, key: CacheKey, value: Any) -> Optional[T]:
        try:
            return self._validate(value)
        except CacheValueTypeError:
            logger.warning(
                f"Dropping cache entry {key} holding unexpected {type(value).__name__}"
            )
            self.cache.delete(key)
            return None

    def get(self, tenant_id: str, *parts: Union[str, int]) -> Optional[T]:
        key = self.key(tenant_id, *parts)
        value = self.cache.get(key)
        if value is None:
            return None
        return self._checked(key, value)

    def set(self, value: T, tenant_id: str, *parts: Union[str, int], ttl_seconds: Optional[float] = None):
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self.cache.set(self.key(tenant_id, *parts), self._validate(value), ttl)

    async def get_or_compute(
        self,
        compute: Callable[[], Union[T, Awaitable[T]]],
        tenant_id: str,
        *parts: Union[str, int],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        key = self.key(tenant_id, *parts)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds

        async def compute_validated() -> T:
            value = compute()
            if inspect.isawaitable(value):
                value = await value
            return self._validate(value)

        value = self._checked(key, await self.cache.get_or_compute(key, compute_validated, ttl))
        if value is None:
            # Entry of the wrong shape was written behind our back; recompute
            value = await self.cache.get_or_compute(key, compute_validated, ttl)
        return value

    def invalidate(self, tenant_id: Optional[str] = None) -> int:
        """Drop this entity's entries for one tenant, or for every tenant."""
        if tenant_id is None:
            return self.cache.invalidate_pattern(f"{self.entity}{KEY_SEPARATOR}*")

        base = self.key(tenant_id)
        removed = self.cache.invalidate_pattern(f"{base}{KEY_SEPARATOR}*")
        if self.cache.delete(base):
            removed += 1
        return removed
