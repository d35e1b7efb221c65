"""
Generate Prediction Use Case

Builds (or serves from cache) the prediction bundle for one fixture:
stats for both sides are fetched concurrently, head-to-head is optional,
and the engine runs on whatever was gathered.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from src.application.dtos.dtos import (
    BookingsPredictionDTO,
    BTTSPredictionDTO,
    ComboPredictionDTO,
    CornersPredictionDTO,
    HeadToHeadDisplayDTO,
    MatchPredictionDTO,
    OverUnderPredictionDTO,
    ScorelinePredictionDTO,
    TeamStatsDisplayDTO,
    TeamStatsPairDTO,
    WinnerPredictionDTO,
)
from src.application.use_cases.use_cases import GetHeadToHeadUseCase, GetTeamStatsUseCase
from src.domain.entities.entities import HeadToHeadSummary, MatchPrediction, TeamStats
from src.domain.exceptions import RateLimitExceededException
from src.domain.services.prediction_service import PredictionService
from src.domain.services.statistics_service import StatisticsService
from src.infrastructure.cache.prediction_cache import PredictionCache

logger = logging.getLogger(__name__)


def to_match_prediction_dto(
    fixture_id: int,
    home_team: str,
    away_team: str,
    prediction: MatchPrediction,
) -> MatchPredictionDTO:
    """Map a domain prediction onto its API payload."""
    team_stats = None
    if prediction.home_stats_display and prediction.away_stats_display:
        team_stats = TeamStatsPairDTO(
            home=TeamStatsDisplayDTO.model_validate(prediction.home_stats_display),
            away=TeamStatsDisplayDTO.model_validate(prediction.away_stats_display),
        )

    return MatchPredictionDTO(
        fixture_id=fixture_id,
        home_team=home_team,
        away_team=away_team,
        winner=WinnerPredictionDTO.model_validate(prediction.winner),
        scoreline=ScorelinePredictionDTO.model_validate(prediction.scoreline),
        btts=BTTSPredictionDTO.model_validate(prediction.btts),
        over_under=OverUnderPredictionDTO.model_validate(prediction.over_under),
        corners=CornersPredictionDTO.model_validate(prediction.corners),
        bookings=BookingsPredictionDTO.model_validate(prediction.bookings),
        combo=ComboPredictionDTO.model_validate(prediction.combo),
        overall_confidence=prediction.overall_confidence,
        team_stats=team_stats,
        h2h=HeadToHeadDisplayDTO.model_validate(prediction.h2h_display) if prediction.h2h_display else None,
        created_at=prediction.created_at,
    )


class GeneratePredictionUseCase:
    """
    Use case for generating a match prediction.

    Fallback rules:
    - No team ids: both sides use mock statistics.
    - Either stats fetch fails: both sides use mock statistics (never a mix).
    - Rate limiting is not a failure to hide: it propagates to the caller.
    - Head-to-head failures only drop the head-to-head adjustment.
    """

    def __init__(
        self,
        team_stats_use_case: GetTeamStatsUseCase,
        head_to_head_use_case: GetHeadToHeadUseCase,
        prediction_service: PredictionService,
        statistics_service: StatisticsService,
        prediction_cache: PredictionCache,
    ):
        self.team_stats_use_case = team_stats_use_case
        self.head_to_head_use_case = head_to_head_use_case
        self.prediction_service = prediction_service
        self.statistics_service = statistics_service
        self.prediction_cache = prediction_cache

    def _mock_pair(self, home_team: str, away_team: str) -> tuple[TeamStats, TeamStats]:
        return (
            self.statistics_service.generate_mock_stats(home_team),
            self.statistics_service.generate_mock_stats(away_team),
        )

    async def _load_stats(
        self,
        home_team: str,
        away_team: str,
        home_team_id: int,
        away_team_id: int,
    ) -> Optional[tuple[TeamStats, TeamStats]]:
        """Fetch both sides concurrently. None means the mock pair must be used."""
        results = await asyncio.gather(
            self.team_stats_use_case.execute(home_team_id, home_team),
            self.team_stats_use_case.execute(away_team_id, away_team),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, RateLimitExceededException):
                logger.error("API rate limit exceeded while fetching team stats (10 requests/minute)")
                raise result

        errors = [r for r in results if isinstance(r, Exception)]
        if errors:
            logger.warning(f"Falling back to mock stats: {errors[0]}")
            return None

        return results[0], results[1]

    async def _load_head_to_head(
        self,
        home_team_id: int,
        away_team_id: int,
    ) -> Optional[HeadToHeadSummary]:
        try:
            return await self.head_to_head_use_case.execute(home_team_id, away_team_id)
        except Exception as e:
            logger.warning(f"Could not fetch H2H data, continuing without it: {e}")
            return None

    async def execute(
        self,
        fixture_id: int,
        home_team: str,
        away_team: str,
        home_team_id: Optional[int] = None,
        away_team_id: Optional[int] = None,
    ) -> MatchPredictionDTO:
        """
        Get the prediction for a fixture.

        Raises:
            RateLimitExceededException: The stats provider is rate limited
        """
        cached = self.prediction_cache.get(fixture_id)
        if cached is not None:
            logger.info(f"Using cached prediction for match {fixture_id}")
            return to_match_prediction_dto(fixture_id, home_team, away_team, cached)

        real_stats = None
        h2h = None
        if home_team_id and away_team_id:
            logger.info(
                f"Fetching real-time data for {home_team} (ID: {home_team_id}) "
                f"vs {away_team} (ID: {away_team_id})"
            )
            real_stats = await self._load_stats(home_team, away_team, home_team_id, away_team_id)
            if real_stats is not None:
                h2h = await self._load_head_to_head(home_team_id, away_team_id)
        else:
            logger.info("Using mock statistics (team IDs not provided)")

        home_stats, away_stats = real_stats or self._mock_pair(home_team, away_team)
        prediction = self.prediction_service.predict_match(home_stats, away_stats, h2h)

        if real_stats is not None and home_stats.matches_played:
            prediction = replace(
                prediction,
                home_stats_display=self.prediction_service.build_team_stats_display(home_stats, True),
                away_stats_display=self.prediction_service.build_team_stats_display(away_stats, False),
            )
        if h2h is not None and not h2h.is_empty:
            prediction = replace(
                prediction,
                h2h_display=self.prediction_service.build_h2h_display(h2h, home_team, away_team),
            )

        logger.info(
            f"Prediction generated for match {fixture_id}: {prediction.winner.prediction} "
            f"({prediction.winner.confidence}%), {prediction.scoreline}, "
            f"overall {prediction.overall_confidence}%"
        )

        self.prediction_cache.set(fixture_id, prediction)
        return to_match_prediction_dto(fixture_id, home_team, away_team, prediction)
