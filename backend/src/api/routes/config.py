"""
Configuration Router

Reports whether the Football-Data.org key is set, without exposing it.
"""

from fastapi import APIRouter, Depends

from src.application.dtos.dtos import ApiKeyStatusDTO
from src.infrastructure.data_sources.football_data_org import FootballDataOrgSource
from src.api.dependencies import get_football_data_org


router = APIRouter(prefix="/config", tags=["Config"])


@router.get(
    "/api-key",
    response_model=ApiKeyStatusDTO,
    summary="Football-Data.org API key status",
)
async def get_api_key_status(
    source: FootballDataOrgSource = Depends(get_football_data_org),
) -> ApiKeyStatusDTO:
    if not source.is_configured:
        return ApiKeyStatusDTO(api_key_exists=False)
    return ApiKeyStatusDTO(
        api_key_exists=True,
        api_key_length=len(source.config.api_key),
        api_key_preview=source.masked_api_key,
    )
