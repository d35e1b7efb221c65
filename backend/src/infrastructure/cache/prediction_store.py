"""
Prediction Store Implementations

Concrete key/value stores behind the PredictionStore interface:
- InMemoryPredictionStore: process-local dict guarded by a lock
- RedisPredictionStore: JSON documents in Redis, shared between workers
"""

import logging
import threading
from typing import Optional

from src.domain.entities.entities import CachedPrediction
from src.domain.repositories.repositories import PredictionStore
from src.infrastructure.cache.redis_client import RedisClient
from src.infrastructure.cache.serialization import (
    cached_prediction_from_dict,
    cached_prediction_to_dict,
)

logger = logging.getLogger(__name__)


class InMemoryPredictionStore(PredictionStore):
    """Thread-safe in-process store."""

    def __init__(self):
        self._entries: dict[str, CachedPrediction] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CachedPrediction]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: CachedPrediction, ttl_seconds: Optional[int] = None) -> None:
        with self._lock:
            self._entries[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def items(self) -> list[tuple[str, CachedPrediction]]:
        with self._lock:
            return list(self._entries.items())


class RedisPredictionStore(PredictionStore):
    """
    Store backed by Redis.

    Keys are namespaced with `prefix` so `clear()` only touches
    prediction entries.
    """

    def __init__(self, client: RedisClient, prefix: str = "soccer_predictions:"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[CachedPrediction]:
        data = self.client.get(self._key(key))
        if not data:
            return None
        try:
            return cached_prediction_from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cached prediction {key}: {e}")
            self.client.delete(self._key(key))
            return None

    def set(self, key: str, value: CachedPrediction, ttl_seconds: Optional[int] = None) -> None:
        """Write the entry; Redis drops it by itself once `ttl_seconds` pass."""
        self.client.set(self._key(key), cached_prediction_to_dict(value), ttl_seconds=ttl_seconds)

    def delete(self, key: str) -> bool:
        return self.client.delete(self._key(key))

    def clear(self) -> None:
        for key in self.client.keys(f"{self.prefix}*"):
            self.client.delete(key)

    def items(self) -> list[tuple[str, CachedPrediction]]:
        entries = []
        for full_key in self.client.keys(f"{self.prefix}*"):
            key = full_key[len(self.prefix):]
            entry = self.get(key)
            if entry is not None:
                entries.append((key, entry))
        return entries
