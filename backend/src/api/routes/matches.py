"""
Matches API Routes

Fixtures and results from Football-Data.org. Provider failures are left to
the application exception handlers so rate limits and missing keys keep
their own status codes.
"""
import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from src.application.dtos.dtos import ErrorResponseDTO, MatchesResponseDTO
from src.application.use_cases.use_cases import DataSources, GetLiveMatchesUseCase, GetMatchesUseCase
from src.domain.exceptions import DataSourceException
from src.infrastructure.cache.cache_service import CacheService
from src.api.dependencies import get_data_sources, get_response_cache

router = APIRouter(tags=["Matches"])
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    429: {"model": ErrorResponseDTO, "description": "Football-Data.org rate limit exceeded"},
    500: {"model": ErrorResponseDTO, "description": "Internal server error"},
    502: {"model": ErrorResponseDTO, "description": "Football-Data.org error"},
    503: {"model": ErrorResponseDTO, "description": "Football-Data.org API key not configured"},
}


@router.get(
    "",
    response_model=MatchesResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Get matches in a date window",
    description="Returns fixtures and results of the supported competitions, most recent first.",
)
async def get_matches(
    days_back: int = Query(default=7, ge=0, le=30, description="Days before today to include"),
    days_forward: int = Query(default=0, ge=0, le=30, description="Days after today to include"),
    data_sources: DataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_response_cache),
):
    """Get matches between today - days_back and today + days_forward."""
    cache_key = f"{days_back}:{days_forward}"
    cached_result = cache.get_matches(cache_key)
    if cached_result:
        return cached_result

    try:
        result = await GetMatchesUseCase(data_sources).execute(days_back, days_forward)
    except (HTTPException, DataSourceException):
        raise
    except Exception as e:
        logger.error(f"Error retrieving matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error retrieving matches: {str(e)}")

    cache.set_matches(cache_key, result.model_dump(mode="json"))
    return result


@router.get(
    "/live",
    response_model=MatchesResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Get live matches",
    description="Returns today's matches that are currently in play.",
)
async def get_live_matches(
    data_sources: DataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_response_cache),
):
    """Get all live matches."""
    cached_result = cache.get_live_matches("today")
    if cached_result:
        return cached_result

    try:
        result = await GetLiveMatchesUseCase(data_sources).execute()
    except (HTTPException, DataSourceException):
        raise
    except Exception as e:
        logger.error(f"Error retrieving live matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error retrieving live matches: {str(e)}")

    cache.set_live_matches(result.model_dump(mode="json"), "today")
    return result
