"""
Football-Data.org Data Source

This module integrates with the Football-Data.org v4 API for fixtures,
results, competitions and per-team match history.

API Documentation: https://www.football-data.org/documentation/api
Free tier: 10 requests/minute
"""

import os
import time
from typing import Callable, Optional
from dataclasses import dataclass
import logging
import asyncio

import httpx

from src.domain.constants import FINISHED_STATUSES, ONGOING_STATUSES, SUPPORTED_COMPETITIONS
from src.domain.entities.entities import Match, MatchStatus, Team, League
from src.domain.exceptions import (
    ApiKeyNotConfiguredException,
    DataSourceException,
    InvalidApiKeyException,
    RateLimitExceededException,
)
from src.utils.time_utils import parse_utc_datetime


logger = logging.getLogger(__name__)


@dataclass
class FootballDataOrgConfig:
    """Configuration for Football-Data.org."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: int = 30
    requests_per_minute: int = 10

    def __post_init__(self):
        if self.api_key is None:
            self.api_key = os.getenv("FOOTBALL_DATA_API_KEY") or os.getenv("FOOTBALL_DATA_ORG_KEY")
        if self.base_url is None:
            self.base_url = os.getenv("FOOTBALL_DATA_BASE_URL", "https://api.football-data.org/v4")


def map_status(vendor_status: str) -> MatchStatus:
    """Map a Football-Data.org status onto the display status."""
    if vendor_status in FINISHED_STATUSES:
        return MatchStatus.FINISHED
    if vendor_status in ONGOING_STATUSES:
        return MatchStatus.ONGOING
    return MatchStatus.SCHEDULED


def round_label(stage: Optional[str], matchday: Optional[int]) -> str:
    """'Matchday N' for league rounds, otherwise the readable stage name."""
    if not stage or stage == "REGULAR_SEASON":
        return f"Matchday {matchday}" if matchday is not None else ""
    return stage.replace("_", " ")


class FootballDataOrgSource:
    """
    Data source for Football-Data.org.

    Every request is authenticated with the X-Auth-Token header and
    throttled to the free-tier limit. Failures surface as domain
    exceptions so callers can tell a missing key from a rate limit.
    """

    SOURCE_NAME = "Football-Data.org"

    def __init__(
        self,
        config: Optional[FootballDataOrgConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the data source."""
        self.config = config or FootballDataOrgConfig()
        self._transport = transport
        self._clock = clock
        self._request_times: list[float] = []
        self._rate_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.config.api_key)

    @property
    def masked_api_key(self) -> Optional[str]:
        """Preview of the configured key that is safe to display."""
        key = self.config.api_key
        if not key:
            return None
        if len(key) <= 12:
            return f"{key[:2]}..."
        return f"{key[:8]}...{key[-4:]}"

    async def _wait_for_rate_limit(self):
        """Wait if necessary to respect the rolling per-minute limit."""
        async with self._rate_lock:
            now = self._clock()
            minute_ago = now - 60

            # Clean old request times
            self._request_times = [t for t in self._request_times if t > minute_ago]

            if len(self._request_times) >= self.config.requests_per_minute:
                # Wait until oldest request is more than a minute old
                wait_time = self._request_times[0] + 60 - now
                if wait_time > 0:
                    logger.debug(f"Rate limiting: waiting {wait_time:.2f}s")
                    await asyncio.sleep(wait_time)
                self._request_times.pop(0)

            self._request_times.append(self._clock())

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> dict:
        """
        Make authenticated request to Football-Data.org.

        Args:
            endpoint: API endpoint
            params: Query parameters (None values are dropped)

        Returns:
            Decoded JSON response

        Raises:
            ApiKeyNotConfiguredException: No API key available
            InvalidApiKeyException: The API rejected the key (401)
            RateLimitExceededException: The API rate limit was hit (429)
            DataSourceException: Any other HTTP or transport failure
        """
        if not self.is_configured:
            logger.error("Football-Data.org not configured (FOOTBALL_DATA_API_KEY is not set)")
            raise ApiKeyNotConfiguredException(
                "API key not configured. Please set FOOTBALL_DATA_API_KEY environment variable."
            )

        await self._wait_for_rate_limit()

        url = f"{self.config.base_url}{endpoint}"
        headers = {
            "X-Auth-Token": self.config.api_key,
        }
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    url,
                    headers=headers,
                    params=query,
                    timeout=self.config.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Football-Data.org request error: {e}")
            raise DataSourceException(f"Football-Data.org request failed: {e}") from e

        if response.status_code == 401:
            logger.error("Football-Data.org rejected the API key")
            raise InvalidApiKeyException("Unauthorized: Invalid API key", status_code=401)

        if response.status_code == 429:
            logger.warning("Football-Data.org rate limit hit")
            raise RateLimitExceededException()

        if response.is_error:
            logger.error(f"Football-Data.org HTTP error: {response.status_code} for {endpoint}")
            raise DataSourceException(
                f"API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DataSourceException(
                f"Football-Data.org returned invalid JSON for {endpoint}",
                status_code=response.status_code,
            ) from e

    def _parse_league(self, competition: dict) -> League:
        return League(
            id=int(competition.get("id", 0)),
            name=competition.get("name") or "Unknown",
            code=competition.get("code"),
            emblem_url=competition.get("emblem"),
        )

    def _parse_team(self, team_data: dict) -> Team:
        return Team(
            id=int(team_data.get("id") or 0),
            name=team_data.get("name") or "TBD",
            short_name=team_data.get("shortName") or team_data.get("tla"),
            crest_url=team_data.get("crest"),
        )

    def _parse_match(self, match_data: dict, competition: Optional[dict] = None) -> Optional[Match]:
        """Parse Football-Data.org match into Match entity."""
        try:
            league = self._parse_league(match_data.get("competition") or competition or {})
            vendor_status = match_data.get("status", "SCHEDULED")
            score = (match_data.get("score") or {}).get("fullTime") or {}

            return Match(
                id=int(match_data["id"]),
                league=league,
                home_team=self._parse_team(match_data.get("homeTeam") or {}),
                away_team=self._parse_team(match_data.get("awayTeam") or {}),
                utc_date=parse_utc_datetime(match_data["utcDate"]),
                status=map_status(vendor_status),
                vendor_status=vendor_status,
                round=round_label(match_data.get("stage"), match_data.get("matchday")),
                home_goals=score.get("home"),
                away_goals=score.get("away"),
            )

        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Failed to parse match: {e}")
            return None

    def _parse_matches(self, data: dict) -> list[Match]:
        competition = data.get("competition")
        matches = []
        for match_data in data.get("matches") or []:
            match = self._parse_match(match_data, competition)
            if match:
                matches.append(match)
        return matches

    async def get_competitions(self) -> list[League]:
        """Get the supported competitions available to this API key."""
        data = await self._make_request("/competitions")

        leagues = [
            self._parse_league(comp)
            for comp in data.get("competitions") or []
            if comp.get("code") in SUPPORTED_COMPETITIONS
        ]
        logger.info(f"Football-Data.org: {len(leagues)} supported competitions available")
        return leagues

    async def get_competition_matches(
        self,
        competition_code: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Match]:
        """
        Get matches of one competition.

        Args:
            competition_code: Football-Data.org code (e.g. "PL")
            date_from: Start date (YYYY-MM-DD)
            date_to: End date (YYYY-MM-DD)
        """
        data = await self._make_request(
            f"/competitions/{competition_code}/matches",
            {"dateFrom": date_from, "dateTo": date_to},
        )
        return self._parse_matches(data)

    async def get_matches(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Match]:
        """Get matches across every competition the key can see."""
        data = await self._make_request("/matches", {"dateFrom": date_from, "dateTo": date_to})
        matches = self._parse_matches(data)
        logger.info(f"Football-Data.org: fetched {len(matches)} matches ({date_from} to {date_to})")
        return matches

    async def get_team_matches(
        self,
        team_id: int,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Match]:
        """
        Get a team's matches, optionally limited to a date range.

        Args:
            team_id: Football-Data.org team id
            date_from: Start date (YYYY-MM-DD)
            date_to: End date (YYYY-MM-DD)
        """
        data = await self._make_request(
            f"/teams/{team_id}/matches",
            {"dateFrom": date_from, "dateTo": date_to},
        )
        return self._parse_matches(data)
