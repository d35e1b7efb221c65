"""
Data Transfer Objects (DTOs) Module

DTOs are used to transfer data between layers and to/from the API.
They use Pydantic for validation and serialization. Most of them can be
built straight from the domain dataclasses (`from_attributes`).
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from src.domain.entities.entities import MatchStatus
from src.utils.time_utils import get_current_time


# ============================================================
# Fixtures
# ============================================================

class TeamDTO(BaseModel):
    """Team data transfer object."""
    id: int
    name: str
    short_name: Optional[str] = None
    crest_url: Optional[str] = None

    class Config:
        from_attributes = True


class LeagueDTO(BaseModel):
    """League data transfer object."""
    id: int
    name: str
    code: Optional[str] = None
    emblem_url: Optional[str] = None

    class Config:
        from_attributes = True


class MatchDTO(BaseModel):
    """Match data transfer object."""
    id: int
    league: LeagueDTO
    home_team: TeamDTO
    away_team: TeamDTO
    utc_date: datetime
    status: MatchStatus = MatchStatus.SCHEDULED
    round: str = ""
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None

    class Config:
        from_attributes = True


class MatchesResponseDTO(BaseModel):
    """Response containing a list of fixtures."""
    success: bool = True
    count: int
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    matches: list[MatchDTO] = Field(default_factory=list)


class LeaguesResponseDTO(BaseModel):
    """Response containing the supported competitions."""
    success: bool = True
    count: int
    leagues: list[LeagueDTO] = Field(default_factory=list)


# ============================================================
# Statistics
# ============================================================

class VenueSplitDTO(BaseModel):
    matches: int
    wins: int
    draws: int
    losses: int
    goals_scored: int
    goals_conceded: int
    win_rate: float
    avg_goals_scored: float
    avg_goals_conceded: float
    goal_difference: int

    class Config:
        from_attributes = True


class RecentWindowDTO(BaseModel):
    matches: int
    wins: int
    draws: int
    goals_scored: int
    goals_conceded: int
    form: float

    class Config:
        from_attributes = True


class TeamStatsDTO(BaseModel):
    """Aggregated statistics of one team over the lookback window."""
    team_name: str
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_scored: int
    goals_conceded: int
    goal_difference: int
    clean_sheets: int = 0
    failed_to_score: int = 0
    avg_goals_scored: float = 0.0
    avg_goals_conceded: float = 0.0
    home: Optional[VenueSplitDTO] = None
    away: Optional[VenueSplitDTO] = None
    recent: Optional[RecentWindowDTO] = None
    last3: Optional[RecentWindowDTO] = None
    clean_sheet_rate: Optional[float] = None
    failed_to_score_rate: Optional[float] = None
    scoring_consistency: Optional[float] = None
    win_rate: Optional[float] = None
    avg_corners_for: float = 0.0
    avg_corners_against: float = 0.0
    avg_yellow_cards: float = 0.0
    avg_red_cards: float = 0.0
    estimated_extras: bool = False

    class Config:
        from_attributes = True


class HeadToHeadDTO(BaseModel):
    """Shared history of two teams, oriented to the upcoming fixture."""
    matches_played: int = 0
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0
    avg_goals: float = 0.0
    btts_percentage: float = 0.0
    recent_matches: list[MatchDTO] = Field(default_factory=list)

    class Config:
        from_attributes = True


# ============================================================
# Predictions
# ============================================================

class WinnerPredictionDTO(BaseModel):
    prediction: str
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str

    class Config:
        from_attributes = True


class ScorelinePredictionDTO(BaseModel):
    home: int = Field(..., ge=0)
    away: int = Field(..., ge=0)
    confidence: int = Field(..., ge=0, le=100)

    class Config:
        from_attributes = True


class BTTSPredictionDTO(BaseModel):
    prediction: str
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str

    class Config:
        from_attributes = True


class OverUnderPredictionDTO(BaseModel):
    prediction: str
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    expected_goals: float

    class Config:
        from_attributes = True


class CornersRangeDTO(BaseModel):
    min: int
    max: int

    class Config:
        from_attributes = True


class CornersPredictionDTO(BaseModel):
    prediction: str
    range: CornersRangeDTO
    confidence: int = Field(..., ge=0, le=100)

    class Config:
        from_attributes = True


class BookingsPredictionDTO(BaseModel):
    level: str
    expected_cards: float
    confidence: int = Field(..., ge=0, le=100)

    class Config:
        from_attributes = True


class ComboPredictionDTO(BaseModel):
    prediction: str
    confidence: int = Field(..., ge=0, le=100)

    class Config:
        from_attributes = True


class TeamStatsDisplayDTO(BaseModel):
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

    class Config:
        from_attributes = True


class TeamStatsPairDTO(BaseModel):
    home: TeamStatsDisplayDTO
    away: TeamStatsDisplayDTO


class HeadToHeadDisplayDTO(BaseModel):
    matches_played: int
    distribution: str
    avg_goals: float
    btts_percentage: float

    class Config:
        from_attributes = True


class MatchPredictionDTO(BaseModel):
    """Full prediction bundle for one fixture."""
    fixture_id: int
    home_team: str
    away_team: str
    winner: WinnerPredictionDTO
    scoreline: ScorelinePredictionDTO
    btts: BTTSPredictionDTO
    over_under: OverUnderPredictionDTO
    corners: CornersPredictionDTO
    bookings: BookingsPredictionDTO
    combo: ComboPredictionDTO
    overall_confidence: int = Field(..., ge=0, le=100)
    team_stats: Optional[TeamStatsPairDTO] = None
    h2h: Optional[HeadToHeadDisplayDTO] = None
    created_at: datetime


class PredictionCacheStatsDTO(BaseModel):
    count: int
    oldest_timestamp: Optional[float] = None
    ttl_seconds: int


class PredictionCacheClearedDTO(BaseModel):
    success: bool = True
    message: str = "Prediction cache cleared"


# ============================================================
# Highlights
# ============================================================

class HighlightVideoDTO(BaseModel):
    title: str
    embed: str

    class Config:
        from_attributes = True


class HighlightDTO(BaseModel):
    """Highlight entry from the ScoreBat feed."""
    title: str
    competition: str = ""
    date: str = ""
    thumbnail: str = ""
    match_view_url: Optional[str] = None
    home_name: str = ""
    away_name: str = ""
    videos: list[HighlightVideoDTO] = Field(default_factory=list)
    embed_url: Optional[str] = None

    class Config:
        from_attributes = True


class HighlightsResponseDTO(BaseModel):
    success: bool = True
    count: int
    highlights: list[HighlightDTO] = Field(default_factory=list)


# ============================================================
# Service
# ============================================================

class ApiKeyStatusDTO(BaseModel):
    """Whether the Football-Data.org key is configured (never the key itself)."""
    api_key_exists: bool
    api_key_length: int = 0
    api_key_preview: str = "NOT FOUND"
    env_var_name: str = "FOOTBALL_DATA_API_KEY"


class HealthResponseDTO(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=get_current_time)


class ErrorResponseDTO(BaseModel):
    """Error response."""
    error: str
    message: str
    details: Optional[dict] = None
