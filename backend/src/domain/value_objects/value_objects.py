"""
Domain Value Objects Module

Value objects are immutable objects that are defined by their attributes rather than identity.
They encapsulate validation logic and provide type safety.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TeamStrength:
    """
    Represents a team's attacking and defensive strength for one fixture.

    Attack is expressed in goals per match, blended from the venue average
    and recent scoring. Defense is goals conceded per match after the
    clean-sheet discount and is never below 0.3.
    """
    attack: float
    defense: float

    def __post_init__(self):
        if self.attack < 0 or self.defense < 0:
            raise ValueError("Strength values cannot be negative")


@dataclass(frozen=True)
class H2HFactor:
    """
    Head-to-head adjustment applied to the winner scores.

    The bonuses are small nudges (at most +/-5), never dominant factors.
    """
    home_bonus: float = 0.0
    away_bonus: float = 0.0
    avg_goals: float = 2.5
    btts_rate: float = 50.0
    has_history: bool = False
