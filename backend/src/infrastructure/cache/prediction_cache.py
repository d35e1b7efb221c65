"""
Prediction Cache Policy

Time-based expiry on top of any PredictionStore. Entries are keyed by
fixture id, written whole with their creation time, and evicted on read
once they are older than the expiry window. Writes and stats also sweep
out every expired entry, so the store never outgrows one window of
fixtures; stores that can expire keys themselves (Redis) get the window
as their TTL.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from src.domain.entities.entities import CachedPrediction, MatchPrediction
from src.domain.repositories.repositories import PredictionStore

logger = logging.getLogger(__name__)


DEFAULT_PREDICTION_TTL_SECONDS = 60 * 60  # 1 hour


@dataclass(frozen=True)
class PredictionCacheStats:
    count: int
    oldest_timestamp: Optional[float]


class PredictionCache:
    """
    Expiring cache of match predictions.

    Args:
        store: Backing key/value store
        ttl_seconds: Expiry window (defaults to PREDICTION_CACHE_TTL_SECONDS or 1 hour)
        clock: Returns the current epoch time in seconds
    """

    KEY_PREFIX = "predictions:"

    def __init__(
        self,
        store: PredictionStore,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        if ttl_seconds is None:
            ttl_seconds = int(os.getenv("PREDICTION_CACHE_TTL_SECONDS", DEFAULT_PREDICTION_TTL_SECONDS))
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _key(self, fixture_id: int) -> str:
        return f"{self.KEY_PREFIX}{fixture_id}"

    def _is_expired(self, entry: CachedPrediction) -> bool:
        return self._clock() - entry.timestamp > self.ttl_seconds

    def get(self, fixture_id: int) -> Optional[MatchPrediction]:
        """Get a fresh cached prediction, evicting it if it has expired."""
        key = self._key(fixture_id)
        entry = self.store.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            logger.debug(f"Cached prediction for fixture {fixture_id} expired")
            self.store.delete(key)
            return None

        return entry.prediction

    def set(self, fixture_id: int, prediction: MatchPrediction) -> None:
        self.purge_expired()
        self.store.set(
            self._key(fixture_id),
            CachedPrediction(prediction=prediction, timestamp=self._clock()),
            ttl_seconds=self.ttl_seconds,
        )

    def purge_expired(self) -> int:
        """Delete every expired entry. Returns how many were removed."""
        removed = 0
        for key, entry in self.store.items():
            if self._is_expired(entry) and self.store.delete(key):
                removed += 1
        if removed:
            logger.debug(f"Purged {removed} expired predictions")
        return removed

    def invalidate(self, fixture_id: int) -> bool:
        return self.store.delete(self._key(fixture_id))

    def clear(self) -> None:
        self.store.clear()
        logger.info("Prediction cache cleared")

    def stats(self) -> PredictionCacheStats:
        self.purge_expired()
        entries = self.store.values()
        if not entries:
            return PredictionCacheStats(count=0, oldest_timestamp=None)
        return PredictionCacheStats(
            count=len(entries),
            oldest_timestamp=min(e.timestamp for e in entries),
        )
