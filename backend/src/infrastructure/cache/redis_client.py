"""
Redis Client Module

JSON-over-Redis wrapper shared by the response cache and the prediction
store. Redis is optional: when USE_REDIS is not "true", or the server
cannot be reached, every operation degrades to a no-op and callers keep
using their in-process storage.
"""

import json
import logging
import os
from typing import Any, Callable, Optional

import redis

logger = logging.getLogger(__name__)


class RedisClient:
    """Wrapper for Redis operations with JSON values."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db: int = 0,
        password: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        self.host = host or os.getenv("REDIS_HOST", "localhost")
        self.port = port or int(os.getenv("REDIS_PORT", 6379))
        self.password = password or os.getenv("REDIS_PASSWORD") or None
        self.db = db
        if enabled is None:
            enabled = os.getenv("USE_REDIS", "false").lower() == "true"

        self._redis: Optional[redis.Redis] = None
        if enabled:
            self._connect()
        else:
            logger.info("Redis disabled (USE_REDIS is not 'true')")

    def _connect(self) -> None:
        client = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis unreachable at {self.host}:{self.port}: {e}")
            return
        self._redis = client
        logger.info(f"Connected to Redis at {self.host}:{self.port}")

    @property
    def is_connected(self) -> bool:
        if self._redis is None:
            return False
        try:
            return bool(self._redis.ping())
        except redis.RedisError:
            return False

    def _call(self, action: str, key: str, operation: Callable[[redis.Redis], Any], default: Any) -> Any:
        """Run one Redis operation, logging and returning `default` on failure."""
        if not self.is_connected:
            return default
        try:
            return operation(self._redis)
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.error(f"Redis {action} failed for {key}: {e}")
            return default

    def get(self, key: str) -> Optional[Any]:
        raw = self._call("get", key, lambda r: r.get(key), None)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Redis value for {key} is not JSON: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Store `value` as JSON, expiring after `ttl_seconds` when given."""
        return bool(self._call(
            "set", key, lambda r: r.set(key, json.dumps(value, default=str), ex=ttl_seconds), False
        ))

    def delete(self, key: str) -> bool:
        return bool(self._call("delete", key, lambda r: r.delete(key), 0))

    def keys(self, pattern: str = "*") -> list[str]:
        """Keys matching a glob pattern (SCAN based, never blocks the server)."""
        return self._call("scan", pattern, lambda r: list(r.scan_iter(match=pattern)), [])


_redis_instance: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Process-wide client, created on first use."""
    global _redis_instance
    if _redis_instance is None:
        _redis_instance = RedisClient()
    return _redis_instance
