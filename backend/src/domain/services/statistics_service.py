"""
Statistics Domain Service

Handles calculation of team statistics and head-to-head summaries from
match history.
"""

import random
import re
from typing import List, Optional

from src.domain.constants import (
    CLUB_NAME_TOKENS,
    ESTIMATED_CORNERS_RANGE,
    ESTIMATED_RED_CARDS_RANGE,
    ESTIMATED_YELLOW_CARDS_RANGE,
)
from src.domain.entities.entities import (
    HeadToHeadSummary,
    Match,
    RecentWindow,
    TeamStats,
    VenueSplit,
)


class StatisticsService:
    """
    Turns raw finished-match lists into the typed records the prediction
    engine consumes.

    Corner and card figures are not provided by the fixtures API, so they
    are drawn from bounded ranges; `rng` can be injected for reproducible
    output.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    @staticmethod
    def normalize_name(name: str) -> str:
        """Normalize team name for comparison."""
        cleaned = re.sub(r"[^\w\s]", " ", name.lower())
        words = [w for w in cleaned.split() if w not in CLUB_NAME_TOKENS]
        return "".join(words)

    @staticmethod
    def _finished_matches_for(team_id: int, matches: List[Match]) -> List[Match]:
        """Finished matches of a team in chronological order."""
        finished = [m for m in matches if m.is_finished and m.involves(team_id)]
        return sorted(finished, key=lambda m: m.utc_date)

    @staticmethod
    def _build_window(team_id: int, matches: List[Match], points_form: bool) -> Optional[RecentWindow]:
        """
        Aggregate a recency window.

        Last-5 form is points based ((3W + D) / 3N); last-3 form is the
        plain win percentage.
        """
        if not matches:
            return None

        wins = draws = scored = conceded = 0
        for match in matches:
            goals_for = match.goals_for(team_id)
            goals_against = match.goals_against(team_id)
            scored += goals_for
            conceded += goals_against
            if goals_for > goals_against:
                wins += 1
            elif goals_for == goals_against:
                draws += 1

        count = len(matches)
        if points_form:
            form = (wins * 3 + draws) / (count * 3) * 100
        else:
            form = wins / count * 100

        return RecentWindow(
            matches=count,
            wins=wins,
            draws=draws,
            goals_scored=scored,
            goals_conceded=conceded,
            form=form,
        )

    def _estimate_extras(self) -> dict:
        rng = self._rng
        return {
            "avg_corners_for": rng.uniform(*ESTIMATED_CORNERS_RANGE),
            "avg_corners_against": rng.uniform(*ESTIMATED_CORNERS_RANGE),
            "avg_yellow_cards": rng.uniform(*ESTIMATED_YELLOW_CARDS_RANGE),
            "avg_red_cards": rng.uniform(*ESTIMATED_RED_CARDS_RANGE),
            "estimated_extras": True,
        }

    def calculate_team_stats(
        self,
        team_id: int,
        team_name: str,
        matches: List[Match],
    ) -> TeamStats:
        """
        Calculate statistics for a team from match history.

        Only finished matches involving the team are considered. Home/away
        splits follow the side the team occupied in each fixture; the last-5
        and last-3 windows are the chronologically final entries.

        Args:
            team_id: Football-Data.org team id
            team_name: Display name
            matches: Historical matches (any order, any status)

        Returns:
            TeamStats for the team (matches_played 0 when nothing finished)
        """
        finished = self._finished_matches_for(team_id, matches)
        extras = self._estimate_extras()

        if not finished:
            return TeamStats(
                team_name=team_name,
                matches_played=0,
                wins=0,
                draws=0,
                losses=0,
                goals_scored=0,
                goals_conceded=0,
                **extras,
            )

        wins = draws = losses = 0
        goals_scored = goals_conceded = 0
        clean_sheets = failed_to_score = 0
        venue = {
            True: {"matches": 0, "wins": 0, "draws": 0, "losses": 0, "goals_scored": 0, "goals_conceded": 0},
            False: {"matches": 0, "wins": 0, "draws": 0, "losses": 0, "goals_scored": 0, "goals_conceded": 0},
        }

        for match in finished:
            is_home = match.is_home(team_id)
            goals_for = match.goals_for(team_id)
            goals_against = match.goals_against(team_id)

            goals_scored += goals_for
            goals_conceded += goals_against

            split = venue[is_home]
            split["matches"] += 1
            split["goals_scored"] += goals_for
            split["goals_conceded"] += goals_against

            if goals_for > goals_against:
                wins += 1
                split["wins"] += 1
            elif goals_for == goals_against:
                draws += 1
                split["draws"] += 1
            else:
                losses += 1
                split["losses"] += 1

            if goals_against == 0:
                clean_sheets += 1
            if goals_for == 0:
                failed_to_score += 1

        matches_played = len(finished)

        return TeamStats(
            team_name=team_name,
            matches_played=matches_played,
            wins=wins,
            draws=draws,
            losses=losses,
            goals_scored=goals_scored,
            goals_conceded=goals_conceded,
            clean_sheets=clean_sheets,
            failed_to_score=failed_to_score,
            avg_goals_scored=goals_scored / matches_played,
            avg_goals_conceded=goals_conceded / matches_played,
            home=VenueSplit(**venue[True]),
            away=VenueSplit(**venue[False]),
            recent=self._build_window(team_id, finished[-5:], points_form=True),
            last3=self._build_window(team_id, finished[-3:], points_form=False),
            clean_sheet_rate=clean_sheets / matches_played * 100,
            failed_to_score_rate=failed_to_score / matches_played * 100,
            scoring_consistency=(matches_played - failed_to_score) / matches_played * 100,
            win_rate=wins / matches_played * 100,
            **extras,
        )

    @staticmethod
    def calculate_head_to_head(
        home_team_id: int,
        away_team_id: int,
        matches: List[Match],
    ) -> HeadToHeadSummary:
        """
        Summarize finished fixtures between exactly these two teams.

        Wins are counted for the sides of the upcoming fixture: a past win
        by `home_team_id` counts as a home win even if it was played away.
        """
        pair = {home_team_id, away_team_id}
        shared = sorted(
            (
                m for m in matches
                if m.is_finished and {m.home_team.id, m.away_team.id} == pair
            ),
            key=lambda m: m.utc_date,
        )

        if not shared:
            return HeadToHeadSummary()

        home_wins = away_wins = draws = 0
        total_goals = 0
        btts_count = 0

        for match in shared:
            home_score = match.goals_for(home_team_id)
            away_score = match.goals_against(home_team_id)
            total_goals += home_score + away_score

            if home_score > away_score:
                home_wins += 1
            elif away_score > home_score:
                away_wins += 1
            else:
                draws += 1

            if home_score > 0 and away_score > 0:
                btts_count += 1

        count = len(shared)
        return HeadToHeadSummary(
            matches_played=count,
            home_wins=home_wins,
            away_wins=away_wins,
            draws=draws,
            avg_goals=total_goals / count,
            btts_percentage=btts_count / count * 100,
            recent_matches=tuple(shared[-3:]),
        )

    def generate_mock_stats(self, team_name: str) -> TeamStats:
        """
        Generate plausible synthetic statistics for a team.

        Used as the fallback pair when real statistics cannot be fetched.
        """
        rng = self._rng
        matches_played = 10
        wins = rng.randint(2, 7)
        losses = rng.randint(0, 3)
        draws = matches_played - wins - losses

        goals_scored = wins * 2 + draws + rng.randint(0, 4)
        goals_conceded = losses * 2 + rng.randint(0, 4)

        return TeamStats(
            team_name=team_name,
            matches_played=matches_played,
            wins=wins,
            draws=draws,
            losses=losses,
            goals_scored=goals_scored,
            goals_conceded=goals_conceded,
            clean_sheets=rng.randint(0, 3),
            failed_to_score=rng.randint(0, 2),
            avg_goals_scored=goals_scored / matches_played,
            avg_goals_conceded=goals_conceded / matches_played,
            avg_corners_for=4 + rng.random() * 3,
            avg_corners_against=4 + rng.random() * 3,
            avg_yellow_cards=2 + rng.random() * 2,
            avg_red_cards=rng.random() * 0.3,
            estimated_extras=True,
        )
