"""
Builders for domain objects used across the test suite.
"""

from datetime import datetime, timedelta, timezone

from src.domain.entities.entities import League, Match, MatchStatus, Team


PREMIER_LEAGUE = League(id=2021, name="Premier League", code="PL")
BASE_DATE = datetime(2024, 1, 1, 15, 0, tzinfo=timezone.utc)

_STATUS = {
    "FINISHED": MatchStatus.FINISHED,
    "IN_PLAY": MatchStatus.ONGOING,
}


def make_team(team_id: int, name: str = None) -> Team:
    return Team(id=team_id, name=name or f"Team {team_id}")


def make_match(
    match_id: int,
    home_id: int,
    away_id: int,
    home_goals=None,
    away_goals=None,
    days: int = 0,
    vendor_status: str = "FINISHED",
    home_name: str = None,
    away_name: str = None,
) -> Match:
    """Build a match `days` after the base date."""
    return Match(
        id=match_id,
        league=PREMIER_LEAGUE,
        home_team=make_team(home_id, home_name),
        away_team=make_team(away_id, away_name),
        utc_date=BASE_DATE + timedelta(days=days),
        status=_STATUS.get(vendor_status, MatchStatus.SCHEDULED),
        vendor_status=vendor_status,
        round="Matchday 1",
        home_goals=home_goals,
        away_goals=away_goals,
    )
