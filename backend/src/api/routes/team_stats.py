"""
Team Statistics Router

API endpoints for team statistics and head-to-head history.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.application.dtos.dtos import ErrorResponseDTO, HeadToHeadDTO, TeamStatsDTO
from src.application.use_cases.use_cases import (
    DataSources,
    GetHeadToHeadUseCase,
    GetTeamStatsUseCase,
)
from src.domain.exceptions import DataSourceException
from src.domain.services.statistics_service import StatisticsService
from src.infrastructure.cache.cache_service import CacheService
from src.api.dependencies import get_data_sources, get_response_cache, get_statistics_service


router = APIRouter(tags=["Statistics"])
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    429: {"model": ErrorResponseDTO, "description": "Football-Data.org rate limit exceeded"},
    500: {"model": ErrorResponseDTO, "description": "Internal server error"},
    502: {"model": ErrorResponseDTO, "description": "Football-Data.org error"},
    503: {"model": ErrorResponseDTO, "description": "Football-Data.org API key not configured"},
}


@router.get(
    "/team-stats",
    response_model=TeamStatsDTO,
    responses=ERROR_RESPONSES,
    summary="Get team statistics",
    description=(
        "Aggregates a team's finished matches over the lookback window (90 days by default). "
        "Corner and card figures are estimates and flagged as such."
    ),
)
async def get_team_stats(
    team_id: int = Query(..., description="Football-Data.org team id"),
    team_name: Optional[str] = Query(default=None, description="Display name of the team"),
    data_sources: DataSources = Depends(get_data_sources),
    statistics_service: StatisticsService = Depends(get_statistics_service),
    cache: CacheService = Depends(get_response_cache),
):
    """Get statistics for one team."""
    cached_result = cache.get_team_stats(team_id)
    if cached_result:
        return cached_result

    try:
        stats = await GetTeamStatsUseCase(data_sources, statistics_service).execute(team_id, team_name)
    except DataSourceException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving team stats for {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    result = TeamStatsDTO.model_validate(stats)
    cache.set_team_stats(team_id, result.model_dump(mode="json"))
    return result


@router.get(
    "/head-to-head",
    response_model=HeadToHeadDTO,
    responses=ERROR_RESPONSES,
    summary="Get head-to-head history",
    description="Summarizes finished fixtures between two teams, oriented to the given home/away sides.",
)
async def get_head_to_head(
    home_team_id: int = Query(..., description="Team playing at home in the upcoming fixture"),
    away_team_id: int = Query(..., description="Visiting team in the upcoming fixture"),
    data_sources: DataSources = Depends(get_data_sources),
    statistics_service: StatisticsService = Depends(get_statistics_service),
    cache: CacheService = Depends(get_response_cache),
):
    """Get head-to-head summary for two teams."""
    cached_result = cache.get_head_to_head(home_team_id, away_team_id)
    if cached_result:
        return cached_result

    try:
        summary = await GetHeadToHeadUseCase(data_sources, statistics_service).execute(
            home_team_id, away_team_id
        )
    except DataSourceException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving head-to-head {home_team_id} vs {away_team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    result = HeadToHeadDTO.model_validate(summary)
    cache.set_head_to_head(home_team_id, away_team_id, result.model_dump(mode="json"))
    return result
