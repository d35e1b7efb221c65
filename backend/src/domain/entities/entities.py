"""
Domain Entities Module

This module contains the core domain entities for the football fixtures and
match prediction system. These entities represent the core business concepts
and are independent of any infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from enum import Enum

from src.domain.exceptions import PredictionConsistencyError


class MatchStatus(Enum):
    """Display status of a fixture."""
    FINISHED = "Finished"
    ONGOING = "Ongoing"
    SCHEDULED = "Scheduled"


class MatchOutcome(Enum):
    """Possible outcomes of a football match (from the home side's view)."""
    HOME = "Home"
    DRAW = "Draw"
    AWAY = "Away"


@dataclass(frozen=True)
class Team:
    """
    Represents a football team.

    Attributes:
        id: Football-Data.org team identifier
        name: Full name of the team
        short_name: Abbreviated name (e.g., "Man United")
        crest_url: URL of the team crest
    """
    id: int
    name: str
    short_name: Optional[str] = None
    crest_url: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Team name cannot be empty")


@dataclass(frozen=True)
class League:
    """
    Represents a football league or competition.

    Attributes:
        id: Football-Data.org competition identifier
        name: Full name of the competition (e.g., "Premier League")
        code: Competition code (e.g., "PL")
        emblem_url: URL of the competition emblem
    """
    id: int
    name: str
    code: Optional[str] = None
    emblem_url: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("League name is required")


@dataclass
class Match:
    """
    Represents a football fixture between two teams.

    Attributes:
        id: Unique identifier for the match
        league: The competition
        home_team: The home team
        away_team: The away team
        utc_date: Kick-off time (timezone aware)
        status: Display status
        vendor_status: Raw status reported by the provider
        round: Round label (e.g., "Matchday 12")
        home_goals: Goals scored by home team (None if not played)
        away_goals: Goals scored by away team (None if not played)
    """
    id: int
    league: League
    home_team: Team
    away_team: Team
    utc_date: datetime
    status: MatchStatus = MatchStatus.SCHEDULED
    vendor_status: str = "SCHEDULED"
    round: str = ""
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None

    @property
    def has_score(self) -> bool:
        """Check if both sides of the full-time score are known."""
        return self.home_goals is not None and self.away_goals is not None

    @property
    def is_finished(self) -> bool:
        """Check if the match has finished with a known score."""
        return self.vendor_status == "FINISHED" and self.has_score

    @property
    def is_live(self) -> bool:
        return self.status == MatchStatus.ONGOING

    @property
    def total_goals(self) -> Optional[int]:
        """Get total goals scored in the match."""
        if not self.has_score:
            return None
        return self.home_goals + self.away_goals

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team.id, self.away_team.id)

    def is_home(self, team_id: int) -> bool:
        return self.home_team.id == team_id

    def goals_for(self, team_id: int) -> Optional[int]:
        """Goals scored by the given team in this match."""
        return self.home_goals if self.is_home(team_id) else self.away_goals

    def goals_against(self, team_id: int) -> Optional[int]:
        """Goals conceded by the given team in this match."""
        return self.away_goals if self.is_home(team_id) else self.home_goals


@dataclass(frozen=True)
class VenueSplit:
    """
    A team's record restricted to home or away fixtures.

    Averages and the win rate divide by max(matches, 1), so a team that
    has not played at this venue yet reads as zeros rather than NaN.
    """
    matches: int
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / max(self.matches, 1) * 100

    @property
    def avg_goals_scored(self) -> float:
        return self.goals_scored / max(self.matches, 1)

    @property
    def avg_goals_conceded(self) -> float:
        return self.goals_conceded / max(self.matches, 1)

    @property
    def goal_difference(self) -> int:
        return self.goals_scored - self.goals_conceded

    @property
    def record(self) -> str:
        return f"{self.wins}W-{self.draws}D-{self.losses}L"


@dataclass(frozen=True)
class RecentWindow:
    """Aggregates over the chronologically final N finished matches."""
    matches: int
    wins: int = 0
    draws: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    form: float = 0.0  # 0-100


@dataclass(frozen=True)
class TeamStats:
    """
    Canonical statistics record consumed by the prediction engine.

    Overall figures are always present. Venue splits, recency windows and
    rates are optional: the engine falls back to neutral values when a
    provider cannot supply them.
    """
    team_name: str
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_scored: int
    goals_conceded: int
    clean_sheets: int = 0
    failed_to_score: int = 0
    avg_goals_scored: float = 0.0
    avg_goals_conceded: float = 0.0

    home: Optional[VenueSplit] = None
    away: Optional[VenueSplit] = None
    recent: Optional[RecentWindow] = None
    last3: Optional[RecentWindow] = None

    clean_sheet_rate: Optional[float] = None
    failed_to_score_rate: Optional[float] = None
    scoring_consistency: Optional[float] = None
    win_rate: Optional[float] = None

    avg_corners_for: float = 0.0
    avg_corners_against: float = 0.0
    avg_yellow_cards: float = 0.0
    avg_red_cards: float = 0.0
    estimated_extras: bool = False

    @property
    def goal_difference(self) -> int:
        """Calculate goal difference."""
        return self.goals_scored - self.goals_conceded

    @property
    def record(self) -> str:
        return f"{self.wins}W-{self.draws}D-{self.losses}L"

    def venue(self, is_home: bool) -> Optional[VenueSplit]:
        """Get the home or away split."""
        return self.home if is_home else self.away


@dataclass(frozen=True)
class HeadToHeadSummary:
    """
    Aggregate of finished fixtures between exactly two teams.

    `home_wins` and `away_wins` refer to the sides of the *upcoming*
    fixture, regardless of where the historical games were played.
    """
    matches_played: int = 0
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0
    avg_goals: float = 0.0
    btts_percentage: float = 0.0
    recent_matches: tuple[Match, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.matches_played == 0


# ============================================================
# Prediction bundle
# ============================================================

@dataclass(frozen=True)
class WinnerPrediction:
    prediction: str  # "Home" | "Away" | "Draw"
    confidence: int
    reasoning: str


@dataclass(frozen=True)
class ScorelinePrediction:
    home: int
    away: int
    confidence: int

    @property
    def total(self) -> int:
        return self.home + self.away

    def __str__(self) -> str:
        return f"{self.home}-{self.away}"


@dataclass(frozen=True)
class BTTSPrediction:
    prediction: str  # "Yes" | "No"
    confidence: int
    reasoning: str


@dataclass(frozen=True)
class OverUnderPrediction:
    prediction: str  # "Over 2.5" | "Under 2.5"
    confidence: int
    reasoning: str
    expected_goals: float


@dataclass(frozen=True)
class CornersRange:
    min: int
    max: int


@dataclass(frozen=True)
class CornersPrediction:
    prediction: str  # e.g. "9-13 corners"
    range: CornersRange
    confidence: int


@dataclass(frozen=True)
class BookingsPrediction:
    level: str  # "Low" | "Medium" | "High"
    expected_cards: float
    confidence: int


@dataclass(frozen=True)
class ComboPrediction:
    prediction: str  # e.g. "Home Win + Over 2.5"
    confidence: int


@dataclass(frozen=True)
class TeamStatsDisplay:
    """Formatted team figures shown next to a prediction."""
    name: str
    matches_played: int
    record: str
    venue_record: str
    venue_win_rate: float
    goals: str
    avg_goals: str
    venue_avg_goals: str
    recent_form: str
    last3: str
    clean_sheets: str
    goal_difference: str


@dataclass(frozen=True)
class HeadToHeadDisplay:
    matches_played: int
    distribution: str
    avg_goals: float
    btts_percentage: float


@dataclass(frozen=True)
class MatchPrediction:
    """
    The full prediction bundle for one fixture.

    BTTS and Over/Under are read off the scoreline; construction fails if
    they disagree with it.
    """
    winner: WinnerPrediction
    scoreline: ScorelinePrediction
    btts: BTTSPrediction
    over_under: OverUnderPrediction
    corners: CornersPrediction
    bookings: BookingsPrediction
    combo: ComboPrediction
    overall_confidence: int
    home_stats_display: Optional[TeamStatsDisplay] = None
    away_stats_display: Optional[TeamStatsDisplay] = None
    h2h_display: Optional[HeadToHeadDisplay] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    def __post_init__(self):
        both_score = self.scoreline.home > 0 and self.scoreline.away > 0
        if (self.btts.prediction == "Yes") != both_score:
            raise PredictionConsistencyError(
                f"BTTS '{self.btts.prediction}' contradicts scoreline {self.scoreline}"
            )

        is_over = self.scoreline.total > 2.5
        if (self.over_under.prediction == "Over 2.5") != is_over:
            raise PredictionConsistencyError(
                f"Over/Under '{self.over_under.prediction}' contradicts scoreline {self.scoreline}"
            )


@dataclass(frozen=True)
class CachedPrediction:
    """A prediction together with the epoch time it was written."""
    prediction: MatchPrediction
    timestamp: float


# ============================================================
# Highlights
# ============================================================

@dataclass(frozen=True)
class HighlightVideo:
    title: str
    embed: str


@dataclass(frozen=True)
class Highlight:
    """
    A highlight entry from the ScoreBat feed.

    Attributes:
        title: "Home - Away" title as published
        competition: Competition name
        date: Publication date (ISO string as returned by the feed)
        thumbnail: Thumbnail image URL
        match_view_url: ScoreBat page for the match
        home_name: Name of the first side
        away_name: Name of the second side
        videos: Embeddable videos
    """
    title: str
    competition: str = ""
    date: str = ""
    thumbnail: str = ""
    match_view_url: Optional[str] = None
    home_name: str = ""
    away_name: str = ""
    videos: tuple[HighlightVideo, ...] = ()

    @property
    def embed_url(self) -> Optional[str]:
        """Get the embed code of the first video, if any."""
        if not self.videos:
            return None
        return self.videos[0].embed
