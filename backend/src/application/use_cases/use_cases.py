"""
Application Use Cases Module

Use cases represent application-specific business rules and orchestrate
the flow of data between the domain layer and the infrastructure layer.
"""

import os
from datetime import timedelta
from typing import Optional
from dataclasses import dataclass
import logging
import asyncio

from src.domain.constants import SUPPORTED_COMPETITIONS, TEAM_STATS_LOOKBACK_DAYS
from src.domain.entities.entities import HeadToHeadSummary, Highlight, Match, TeamStats
from src.domain.services.statistics_service import StatisticsService
from src.infrastructure.data_sources.football_data_org import FootballDataOrgSource
from src.infrastructure.data_sources.scorebat import ScoreBatSource
from src.application.dtos.dtos import (
    HighlightDTO,
    HighlightsResponseDTO,
    LeagueDTO,
    LeaguesResponseDTO,
    MatchDTO,
    MatchesResponseDTO,
)
from src.utils.time_utils import DATE_FORMAT, get_current_time, get_date_window, get_today_str


logger = logging.getLogger(__name__)


@dataclass
class DataSources:
    """Container for all data sources."""
    football_data_org: FootballDataOrgSource
    scorebat: ScoreBatSource


def _sorted_match_dtos(matches: list[Match]) -> list[MatchDTO]:
    """Most recent first."""
    ordered = sorted(matches, key=lambda m: m.utc_date, reverse=True)
    return [MatchDTO.model_validate(m) for m in ordered]


class GetLeaguesUseCase:
    """Use case for getting the supported competitions."""

    def __init__(self, data_sources: DataSources):
        self.data_sources = data_sources

    async def execute(self) -> LeaguesResponseDTO:
        leagues = await self.data_sources.football_data_org.get_competitions()
        league_dtos = [LeagueDTO.model_validate(league) for league in leagues]
        return LeaguesResponseDTO(count=len(league_dtos), leagues=league_dtos)


class GetMatchesUseCase:
    """
    Use case for getting fixtures and results in a date window.

    Fans out over every supported competition concurrently. A competition
    that fails contributes nothing; only when every competition fails is
    the generic /matches endpoint used instead.
    """

    def __init__(self, data_sources: DataSources):
        self.data_sources = data_sources

    async def _fetch_all_competitions(self, date_from: str, date_to: str) -> list[Match]:
        source = self.data_sources.football_data_org
        codes = list(SUPPORTED_COMPETITIONS)

        results = await asyncio.gather(
            *[source.get_competition_matches(code, date_from, date_to) for code in codes],
            return_exceptions=True,
        )

        matches: list[Match] = []
        failures = 0
        for code, result in zip(codes, results):
            if isinstance(result, Exception):
                failures += 1
                logger.warning(f"Failed to fetch {code}: {result}")
                continue
            matches.extend(result)

        if failures == len(codes):
            raise results[0]

        return matches

    async def execute(self, days_back: int = 7, days_forward: int = 0) -> MatchesResponseDTO:
        date_from, date_to = get_date_window(days_back, days_forward)
        logger.info(f"Fetching matches from {date_from} to {date_to}")

        try:
            matches = await self._fetch_all_competitions(date_from, date_to)
        except Exception as e:
            logger.warning(f"Failed to fetch from all leagues, trying general endpoint: {e}")
            matches = await self.data_sources.football_data_org.get_matches(date_from, date_to)

        return MatchesResponseDTO(
            count=len(matches),
            date_from=date_from,
            date_to=date_to,
            matches=_sorted_match_dtos(matches),
        )


class GetLiveMatchesUseCase:
    """Use case for getting today's matches that are in play."""

    def __init__(self, data_sources: DataSources):
        self.data_sources = data_sources

    async def execute(self) -> MatchesResponseDTO:
        today = get_today_str()
        matches = await self.data_sources.football_data_org.get_matches(today, today)
        live = [m for m in matches if m.is_live]
        logger.info(f"Found {len(live)} live matches out of {len(matches)} today")
        return MatchesResponseDTO(count=len(live), matches=_sorted_match_dtos(live))


class GetTeamStatsUseCase:
    """
    Use case for building a team's statistics from its recent results.

    Looks back TEAM_STATS_LOOKBACK_DAYS days (90 by default) from today.
    """

    def __init__(
        self,
        data_sources: DataSources,
        statistics_service: StatisticsService,
        lookback_days: Optional[int] = None,
    ):
        self.data_sources = data_sources
        self.statistics_service = statistics_service
        if lookback_days is None:
            lookback_days = int(os.getenv("TEAM_STATS_LOOKBACK_DAYS", TEAM_STATS_LOOKBACK_DAYS))
        self.lookback_days = lookback_days

    @staticmethod
    def _resolve_team_name(team_id: int, matches: list[Match]) -> Optional[str]:
        for match in matches:
            if match.home_team.id == team_id:
                return match.home_team.name
            if match.away_team.id == team_id:
                return match.away_team.name
        return None

    async def execute(self, team_id: int, team_name: Optional[str] = None) -> TeamStats:
        now = get_current_time()
        date_from = (now - timedelta(days=self.lookback_days)).strftime(DATE_FORMAT)
        date_to = now.strftime(DATE_FORMAT)

        matches = await self.data_sources.football_data_org.get_team_matches(team_id, date_from, date_to)
        name = team_name or self._resolve_team_name(team_id, matches) or f"Team {team_id}"

        stats = self.statistics_service.calculate_team_stats(team_id, name, matches)
        if stats.matches_played == 0:
            logger.warning(f"No finished matches found for {name}")
        else:
            logger.info(
                f"{name} stats: {stats.matches_played} matches | {stats.record} | "
                f"GF:{stats.goals_scored} GA:{stats.goals_conceded}"
            )
        return stats


class GetHeadToHeadUseCase:
    """Use case for summarizing the shared history of two teams."""

    def __init__(self, data_sources: DataSources, statistics_service: StatisticsService):
        self.data_sources = data_sources
        self.statistics_service = statistics_service

    async def execute(self, home_team_id: int, away_team_id: int) -> HeadToHeadSummary:
        matches = await self.data_sources.football_data_org.get_team_matches(home_team_id)
        summary = self.statistics_service.calculate_head_to_head(home_team_id, away_team_id, matches)
        logger.info(
            f"H2H {home_team_id} vs {away_team_id}: {summary.matches_played} matches | "
            f"Home wins: {summary.home_wins} | Away wins: {summary.away_wins} | Draws: {summary.draws}"
        )
        return summary


class GetHighlightsUseCase:
    """Use case for listing the latest highlights."""

    def __init__(self, data_sources: DataSources):
        self.data_sources = data_sources

    async def execute(self) -> HighlightsResponseDTO:
        highlights = await self.data_sources.scorebat.get_highlights()
        dtos = [HighlightDTO.model_validate(h) for h in highlights]
        return HighlightsResponseDTO(count=len(dtos), highlights=dtos)


class GetMatchHighlightUseCase:
    """Use case for finding the highlight of one fixture by team names."""

    def __init__(self, data_sources: DataSources):
        self.data_sources = data_sources

    async def execute(self, home_team: str, away_team: str) -> Optional[HighlightDTO]:
        highlights = await self.data_sources.scorebat.get_highlights()
        match: Optional[Highlight] = self.data_sources.scorebat.find_match_highlight(
            highlights, home_team, away_team
        )
        if match is None:
            logger.info(f"No highlight found for {home_team} vs {away_team}")
            return None
        return HighlightDTO.model_validate(match)
