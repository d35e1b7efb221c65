"""
Predictions Router

API endpoints for getting match predictions and managing their cache.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from src.application.dtos.dtos import (
    ErrorResponseDTO,
    MatchPredictionDTO,
    PredictionCacheClearedDTO,
    PredictionCacheStatsDTO,
)
from src.application.use_cases.generate_prediction_use_case import GeneratePredictionUseCase
from src.domain.exceptions import DataSourceException
from src.infrastructure.cache.prediction_cache import PredictionCache
from src.api.dependencies import get_generate_prediction_use_case, get_prediction_cache


router = APIRouter(prefix="/predictions", tags=["Predictions"])
logger = logging.getLogger(__name__)


@router.get(
    "/cache/stats",
    response_model=PredictionCacheStatsDTO,
    summary="Prediction cache statistics",
    description="Number of cached predictions and the timestamp of the oldest one.",
)
async def get_prediction_cache_stats(
    prediction_cache: PredictionCache = Depends(get_prediction_cache),
) -> PredictionCacheStatsDTO:
    stats = prediction_cache.stats()
    return PredictionCacheStatsDTO(
        count=stats.count,
        oldest_timestamp=stats.oldest_timestamp,
        ttl_seconds=prediction_cache.ttl_seconds,
    )


@router.delete(
    "/cache",
    response_model=PredictionCacheClearedDTO,
    summary="Clear prediction cache",
    description="Drops every cached prediction so the next request recomputes it.",
)
async def clear_prediction_cache(
    prediction_cache: PredictionCache = Depends(get_prediction_cache),
) -> PredictionCacheClearedDTO:
    prediction_cache.clear()
    return PredictionCacheClearedDTO()


@router.get(
    "/{fixture_id}",
    response_model=MatchPredictionDTO,
    responses={
        429: {"model": ErrorResponseDTO, "description": "Football-Data.org rate limit exceeded"},
        500: {"model": ErrorResponseDTO, "description": "Internal server error"},
    },
    summary="Get prediction for a match",
    description=(
        "Returns winner, scoreline, BTTS, over/under 2.5, corners, bookings and a combo pick. "
        "Real team statistics are used when both team ids are given; otherwise (or when the "
        "statistics cannot be fetched) synthetic statistics are used. Results are cached per "
        "fixture for one hour."
    ),
)
async def get_match_prediction(
    fixture_id: int = Path(..., description="Football-Data.org match id"),
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    home_team_id: Optional[int] = Query(default=None, description="Home team id"),
    away_team_id: Optional[int] = Query(default=None, description="Away team id"),
    use_case: GeneratePredictionUseCase = Depends(get_generate_prediction_use_case),
) -> MatchPredictionDTO:
    """Get prediction for a specific match."""
    try:
        return await use_case.execute(
            fixture_id=fixture_id,
            home_team=home_team,
            away_team=away_team,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
        )
    except DataSourceException:
        raise
    except Exception as e:
        logger.error(f"Error generating prediction for match {fixture_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating prediction: {str(e)}")
