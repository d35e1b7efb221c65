"""
Highlights Router

API endpoints for ScoreBat highlight videos.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from src.application.dtos.dtos import ErrorResponseDTO, HighlightDTO, HighlightsResponseDTO
from src.application.use_cases.use_cases import (
    DataSources,
    GetHighlightsUseCase,
    GetMatchHighlightUseCase,
)
from src.infrastructure.cache.cache_service import CacheService
from src.api.dependencies import get_data_sources, get_response_cache


router = APIRouter(prefix="/highlights", tags=["Highlights"])


@router.get(
    "",
    response_model=HighlightsResponseDTO,
    summary="Get latest highlights",
    description="Returns the latest highlight videos from the ScoreBat feed (empty when the feed is unavailable).",
)
async def get_highlights(
    data_sources: DataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_response_cache),
):
    """Get the highlight feed."""
    cached_result = cache.get_highlights()
    if cached_result:
        return cached_result

    result = await GetHighlightsUseCase(data_sources).execute()
    if result.count:
        cache.set_highlights(result.model_dump(mode="json"))
    return result


@router.get(
    "/match",
    response_model=HighlightDTO,
    responses={
        404: {"model": ErrorResponseDTO, "description": "No highlight for this match"},
    },
    summary="Find highlight for a match",
    description="Matches the given team names against the feed, ignoring case, punctuation and club suffixes.",
)
async def get_match_highlight(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    data_sources: DataSources = Depends(get_data_sources),
) -> HighlightDTO:
    """Get the highlight of one match."""
    result = await GetMatchHighlightUseCase(data_sources).execute(home_team, away_team)
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"No highlight found for {home_team} vs {away_team}",
        )
    return result
