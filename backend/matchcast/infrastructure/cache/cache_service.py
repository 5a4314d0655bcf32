import time
from typing import Any, Optional, Dict, Tuple
import threading
import logging
from matchcast.infrastructure.cache.redis_client import RedisResponseStore, get_redis_store

logger = logging.getLogger(__name__)


class CacheService:
    """
    Read-through response cache with optional Redis backend and an
    in-memory layer.

    Provides TTL presets per API-Football endpoint:
    - FIXTURES: 10 minutes
    - STATISTICS / STANDINGS: 6 hours
    - HEAD_TO_HEAD: 12 hours
    - ODDS: 15 minutes
    - PARLEY: 1 hour
    """

    # TTL Presets (in seconds)
    TTL_FIXTURES = 600
    TTL_STATISTICS = 21600
    TTL_STANDINGS = 21600
    TTL_HEAD_TO_HEAD = 43200
    TTL_ODDS = 900
    TTL_PARLEY = 3600

    def __init__(self, redis_store: Optional[RedisResponseStore] = None):
        # key -> (expires_at, value)
        self._memory_cache: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.RLock()
        self.redis = redis_store if redis_store is not None else get_redis_store()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(namespace: str, endpoint: str, params: Optional[dict] = None) -> str:
        """Build a deterministic key from an endpoint and its query parameters."""
        query = "&".join(f"{k}={v}" for k, v in sorted((params or {}).items()))
        return f"{namespace}:{endpoint}:{query}"

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache (memory first, then Redis)."""
        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is not None:
                expires_at, value = entry
                if expires_at > time.monotonic():
                    self._hits += 1
                    return value
                del self._memory_cache[key]

        value = self.redis.load(key)
        if value is not None:
            self._hits += 1
            return value

        self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Set a value in memory and, when available, in Redis."""
        now = time.monotonic()
        with self._lock:
            self._evict_expired(now)
            self._memory_cache[key] = (now + ttl_seconds, value)
        if ttl_seconds > 0:
            self.redis.store(key, value, ttl_seconds)

    def _evict_expired(self, now: float) -> None:
        # Caller holds the lock
        expired = [k for k, (expires_at, _) in self._memory_cache.items() if expires_at <= now]
        for k in expired:
            del self._memory_cache[k]

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry."""
        in_redis = self.redis.discard(key)
        with self._lock:
            in_memory = self._memory_cache.pop(key, None) is not None
        return in_redis or in_memory

    def clear(self) -> None:
        """Clear all cache entries."""
        removed = self.redis.purge()
        with self._lock:
            self._memory_cache.clear()
        logger.info(f"Cache cleared ({removed} Redis entries)")

    @property
    def stats(self) -> dict:
        with self._lock:
            memory_entries = len(self._memory_cache)
        return {
            "redis_connected": self.redis.is_connected,
            "memory_entries": memory_entries,
            "cache_hits": self._hits,
            "cache_misses": self._misses,
        }


# Singleton instance
_cache_instance: Optional[CacheService] = None
_instance_lock = threading.Lock()


def get_cache_service() -> CacheService:
    """Get the singleton cache service instance."""
    global _cache_instance
    if _cache_instance is None:
        with _instance_lock:
            if _cache_instance is None:
                _cache_instance = CacheService()
                logger.info("CacheService initialized")
    return _cache_instance
