import time
from typing import Any, Callable, Optional, Dict, Tuple
import threading
import logging
from src.infrastructure.cache.redis_client import RedisClient, get_redis_client

logger = logging.getLogger(__name__)


class CacheService:
    """
    Response cache with Redis backend and in-memory secondary layer.

    Values must be JSON-compatible (DTOs are stored as `model_dump(mode="json")`).

    Provides different TTL presets:
    - LIVE_MATCHES: 30 seconds
    - MATCHES: 1 minute
    - HIGHLIGHTS: 5 minutes
    - TEAM_STATS: 30 minutes
    - HEAD_TO_HEAD: 1 hour
    - LEAGUES: 1 hour
    """

    # TTL Presets (in seconds)
    TTL_LIVE_MATCHES = 30
    TTL_MATCHES = 60
    TTL_HIGHLIGHTS = 300
    TTL_TEAM_STATS = 1800
    TTL_HEAD_TO_HEAD = 3600
    TTL_LEAGUES = 3600

    def __init__(
        self,
        redis_client: Optional[RedisClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache service."""
        self._memory_cache: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.RLock()
        self.redis = redis_client or get_redis_client()
        self._clock = clock
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache (Redis first, then memory)."""
        if self.redis.is_connected:
            value = self.redis.get(key)
            if value is not None:
                self._hits += 1
                return value

        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is not None:
                expires_at, value = entry
                if self._clock() < expires_at:
                    self._hits += 1
                    return value
                del self._memory_cache[key]

            self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Set a value in both Redis and Memory."""
        if self.redis.is_connected:
            self.redis.set(key, value, ttl_seconds)

        with self._lock:
            self._memory_cache[key] = (self._clock() + ttl_seconds, value)

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry."""
        redis_ok = False
        if self.redis.is_connected:
            redis_ok = self.redis.delete(key)

        with self._lock:
            in_mem = self._memory_cache.pop(key, None) is not None
            return redis_ok or in_mem

    def clear(self) -> None:
        """Clear all response cache entries."""
        if self.redis.is_connected:
            for prefix in ("leagues", "matches", "live_matches", "team_stats", "h2h", "highlights"):
                for k in self.redis.keys(f"{prefix}:*"):
                    self.redis.delete(k)

        with self._lock:
            self._memory_cache.clear()
            logger.info("Cache cleared")

    def stats(self) -> Dict[str, Any]:
        """Hit/miss counters and backend status."""
        with self._lock:
            entries = len(self._memory_cache)
        total = self._hits + self._misses
        return {
            "backend": "redis" if self.redis.is_connected else "memory",
            "memory_entries": entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total else 0.0,
        }

    # --- Helper methods for specific cache types ---

    def get_leagues(self) -> Optional[Any]:
        return self.get("leagues:supported")

    def set_leagues(self, data: Any) -> None:
        self.set("leagues:supported", data, self.TTL_LEAGUES)

    def get_matches(self, key: str) -> Optional[Any]:
        return self.get(f"matches:{key}")

    def set_matches(self, key: str, data: Any) -> None:
        self.set(f"matches:{key}", data, self.TTL_MATCHES)

    def get_live_matches(self, key: str) -> Optional[Any]:
        """Get live matches from cache."""
        return self.get(f"live_matches:{key}")

    def set_live_matches(self, data: Any, key: str) -> None:
        """Set live matches in cache with short TTL."""
        self.set(f"live_matches:{key}", data, self.TTL_LIVE_MATCHES)

    def get_team_stats(self, team_id: int) -> Optional[Any]:
        return self.get(f"team_stats:{team_id}")

    def set_team_stats(self, team_id: int, data: Any) -> None:
        self.set(f"team_stats:{team_id}", data, self.TTL_TEAM_STATS)

    def get_head_to_head(self, home_team_id: int, away_team_id: int) -> Optional[Any]:
        return self.get(f"h2h:{home_team_id}:{away_team_id}")

    def set_head_to_head(self, home_team_id: int, away_team_id: int, data: Any) -> None:
        self.set(f"h2h:{home_team_id}:{away_team_id}", data, self.TTL_HEAD_TO_HEAD)

    def get_highlights(self) -> Optional[Any]:
        return self.get("highlights:feed")

    def set_highlights(self, data: Any) -> None:
        self.set("highlights:feed", data, self.TTL_HIGHLIGHTS)


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
                logger.info("CacheService initialized with Redis support")
    return _cache_instance
