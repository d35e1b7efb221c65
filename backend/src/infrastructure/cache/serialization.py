"""
JSON-friendly (de)serialization of cached predictions.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional

from src.domain.entities.entities import (
    BookingsPrediction,
    BTTSPrediction,
    CachedPrediction,
    ComboPrediction,
    CornersPrediction,
    CornersRange,
    HeadToHeadDisplay,
    MatchPrediction,
    OverUnderPrediction,
    ScorelinePrediction,
    TeamStatsDisplay,
    WinnerPrediction,
)


def cached_prediction_to_dict(entry: CachedPrediction) -> dict[str, Any]:
    data = asdict(entry)
    data["prediction"]["created_at"] = entry.prediction.created_at.isoformat()
    return data


def _optional(cls, data: Optional[dict]):
    return cls(**data) if data else None


def prediction_from_dict(data: dict[str, Any]) -> MatchPrediction:
    corners = dict(data["corners"])
    corners["range"] = CornersRange(**corners["range"])

    return MatchPrediction(
        winner=WinnerPrediction(**data["winner"]),
        scoreline=ScorelinePrediction(**data["scoreline"]),
        btts=BTTSPrediction(**data["btts"]),
        over_under=OverUnderPrediction(**data["over_under"]),
        corners=CornersPrediction(**corners),
        bookings=BookingsPrediction(**data["bookings"]),
        combo=ComboPrediction(**data["combo"]),
        overall_confidence=data["overall_confidence"],
        home_stats_display=_optional(TeamStatsDisplay, data.get("home_stats_display")),
        away_stats_display=_optional(TeamStatsDisplay, data.get("away_stats_display")),
        h2h_display=_optional(HeadToHeadDisplay, data.get("h2h_display")),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def cached_prediction_from_dict(data: dict[str, Any]) -> CachedPrediction:
    return CachedPrediction(
        prediction=prediction_from_dict(data["prediction"]),
        timestamp=float(data["timestamp"]),
    )
