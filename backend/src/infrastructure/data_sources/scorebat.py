"""
ScoreBat Video API Data Source

Provides free football highlights and goals from major leagues.
API Documentation: https://www.scorebat.com/video-api/v3/
"""

import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any
import os
import httpx

from src.domain.entities.entities import Highlight, HighlightVideo
from src.domain.services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)


@dataclass
class ScoreBatConfig:
    """Configuration for ScoreBat."""
    api_token: Optional[str] = None
    feed_url: str = "https://www.scorebat.com/video-api/v3/feed/"
    timeout: float = 30.0

    def __post_init__(self):
        if self.api_token is None:
            self.api_token = os.getenv("SCOREBAT_TOKEN") or None


class ScoreBatSource:
    """
    Data source for ScoreBat Video API.
    """

    SOURCE_NAME = "ScoreBat"

    def __init__(
        self,
        config: Optional[ScoreBatConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        ScoreBat V3 uses a token in the URL or sometimes no token for a public feed.
        We'll use a token if provided.
        """
        self.config = config or ScoreBatConfig()
        self._transport = transport

    async def get_highlights(self) -> List[Highlight]:
        """
        Fetches the latest highlights feed.

        Failures are logged and produce an empty list.
        """
        params = {"token": self.config.api_token} if self.config.api_token else None

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.config.feed_url,
                    params=params,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"ScoreBat request failed: {e}")
            return []

        highlights = []
        for item in data.get("response") or []:
            highlight = self._parse_highlight(item)
            if highlight:
                highlights.append(highlight)

        logger.info(f"ScoreBat: fetched {len(highlights)} highlights")
        return highlights

    def _parse_highlight(self, item: Dict[str, Any]) -> Optional[Highlight]:
        try:
            videos = tuple(
                HighlightVideo(title=v.get("title", ""), embed=v["embed"])
                for v in item.get("videos") or []
                if v.get("embed")
            )
            return Highlight(
                title=item["title"],
                competition=item.get("competition") or "",
                date=item.get("date") or "",
                thumbnail=item.get("thumbnail") or "",
                match_view_url=item.get("matchviewUrl"),
                home_name=(item.get("side1") or {}).get("name", ""),
                away_name=(item.get("side2") or {}).get("name", ""),
                videos=videos,
            )
        except (KeyError, TypeError, AttributeError) as e:
            logger.debug(f"Skipping malformed ScoreBat item: {e}")
            return None

    @staticmethod
    def find_match_highlight(
        highlights: List[Highlight],
        home_team: str,
        away_team: str,
    ) -> Optional[Highlight]:
        """
        Fuzzy match for team names to find highlights for a specific match.

        Team names are compared against the feed sides first; the title is
        only consulted when no side pair matches.
        """
        home_norm = StatisticsService.normalize_name(home_team)
        away_norm = StatisticsService.normalize_name(away_team)
        if not home_norm or not away_norm:
            return None

        def same_team(name: str, side: str) -> bool:
            return bool(side) and (name in side or side in name)

        for item in highlights:
            sides = (
                StatisticsService.normalize_name(item.home_name),
                StatisticsService.normalize_name(item.away_name),
            )
            if any(same_team(home_norm, s) for s in sides) and any(same_team(away_norm, s) for s in sides):
                return item

        for item in highlights:
            title = StatisticsService.normalize_name(item.title)
            if home_norm in title and away_norm in title:
                return item

        return None
