"""Infrastructure cache module."""

from .cache_service import CacheService, get_cache_service
from .prediction_cache import PredictionCache, PredictionCacheStats
from .prediction_store import InMemoryPredictionStore, RedisPredictionStore

__all__ = [
    "CacheService",
    "get_cache_service",
    "PredictionCache",
    "PredictionCacheStats",
    "InMemoryPredictionStore",
    "RedisPredictionStore",
]
