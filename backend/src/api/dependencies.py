"""
API Dependencies Module

Provides dependency injection for FastAPI routes.
Contains factory functions for creating use case dependencies.
"""

from functools import lru_cache

from src.infrastructure.data_sources.football_data_org import FootballDataOrgSource
from src.infrastructure.data_sources.scorebat import ScoreBatSource
from src.infrastructure.cache.cache_service import CacheService, get_cache_service
from src.infrastructure.cache.prediction_cache import PredictionCache
from src.infrastructure.cache.prediction_store import InMemoryPredictionStore, RedisPredictionStore
from src.infrastructure.cache.redis_client import get_redis_client
from src.domain.services.prediction_service import PredictionService
from src.domain.services.statistics_service import StatisticsService
from src.application.use_cases.use_cases import (
    DataSources,
    GetHeadToHeadUseCase,
    GetTeamStatsUseCase,
)
from src.application.use_cases.generate_prediction_use_case import GeneratePredictionUseCase


@lru_cache()
def get_football_data_org() -> FootballDataOrgSource:
    """Get Football-Data.org data source (cached)."""
    return FootballDataOrgSource()


@lru_cache()
def get_scorebat() -> ScoreBatSource:
    """Get ScoreBat data source (cached)."""
    return ScoreBatSource()


def get_data_sources() -> DataSources:
    """Get all data sources container."""
    return DataSources(
        football_data_org=get_football_data_org(),
        scorebat=get_scorebat(),
    )


@lru_cache()
def get_prediction_service() -> PredictionService:
    """Get prediction service (cached)."""
    return PredictionService()


@lru_cache()
def get_statistics_service() -> StatisticsService:
    """Get statistics service (cached)."""
    return StatisticsService()


def get_response_cache() -> CacheService:
    """Get the shared response cache."""
    return get_cache_service()


@lru_cache()
def get_prediction_cache() -> PredictionCache:
    """Get prediction cache (Redis-backed when Redis is connected, in-memory otherwise)."""
    redis_client = get_redis_client()
    if redis_client.is_connected:
        return PredictionCache(RedisPredictionStore(redis_client))
    return PredictionCache(InMemoryPredictionStore())


def get_generate_prediction_use_case() -> GeneratePredictionUseCase:
    """Wire the prediction use case from the shared services."""
    data_sources = get_data_sources()
    statistics_service = get_statistics_service()
    return GeneratePredictionUseCase(
        team_stats_use_case=GetTeamStatsUseCase(data_sources, statistics_service),
        head_to_head_use_case=GetHeadToHeadUseCase(data_sources, statistics_service),
        prediction_service=get_prediction_service(),
        statistics_service=statistics_service,
        prediction_cache=get_prediction_cache(),
    )
