"""
Leagues Router

API endpoint listing the supported competitions.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from src.application.dtos.dtos import LeaguesResponseDTO, ErrorResponseDTO
from src.application.use_cases.use_cases import DataSources, GetLeaguesUseCase
from src.domain.exceptions import DataSourceException
from src.infrastructure.cache.cache_service import CacheService
from src.api.dependencies import get_data_sources, get_response_cache


router = APIRouter(prefix="/leagues", tags=["Leagues"])
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=LeaguesResponseDTO,
    responses={
        429: {"model": ErrorResponseDTO, "description": "Football-Data.org rate limit exceeded"},
        500: {"model": ErrorResponseDTO, "description": "Internal server error"},
        503: {"model": ErrorResponseDTO, "description": "Football-Data.org API key not configured"},
    },
    summary="Get supported leagues",
    description="Returns the competitions available on the Football-Data.org free tier.",
)
async def get_leagues(
    data_sources: DataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_response_cache),
):
    """Get all supported leagues."""
    cached_result = cache.get_leagues()
    if cached_result:
        return cached_result

    try:
        result = await GetLeaguesUseCase(data_sources).execute()
    except DataSourceException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving leagues: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    cache.set_leagues(result.model_dump(mode="json"))
    return result
