"""
Prediction Service Module

This domain service contains the rule-based match prediction logic:
1. Weighted form scoring (season, last 5, last 3)
2. Attack/defense strength with home/away context
3. Winner and scoreline derivation
4. Secondary markets (BTTS, Over/Under) read off the scoreline

This is a pure domain service with no external dependencies: no I/O and no
shared mutable state, so it is safe to call from any number of callers.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from src.domain.entities.entities import (
    BookingsPrediction,
    BTTSPrediction,
    ComboPrediction,
    CornersPrediction,
    CornersRange,
    HeadToHeadDisplay,
    HeadToHeadSummary,
    MatchOutcome,
    MatchPrediction,
    OverUnderPrediction,
    RecentWindow,
    ScorelinePrediction,
    TeamStats,
    TeamStatsDisplay,
    WinnerPrediction,
)
from src.domain.value_objects.value_objects import H2HFactor, TeamStrength


logger = logging.getLogger(__name__)


OVER_UNDER_LINE = 2.5
NEUTRAL_FORM = 50.0


@dataclass(frozen=True)
class PredictionConfig:
    """
    Tuned constants of the prediction engine.

    The draw threshold and home advantage have no documented derivation;
    they are kept configurable so behavior is preserved by default.
    """
    home_advantage_base: float = 15.0
    draw_threshold: float = 8.0
    base_confidence: float = 55.0
    max_winner_confidence: float = 92.0
    winner_goal_multiplier: float = 1.3
    loser_goal_multiplier: float = 0.7
    min_expected_goals: float = 0.3
    max_expected_goals: float = 3.5
    max_goals: int = 4
    scoreline_confidence: int = 58
    btts_base_confidence: int = 70
    btts_max_confidence: int = 85
    over_under_base_confidence: int = 65
    over_under_max_confidence: int = 92
    corners_confidence: int = 70
    combo_confidence: int = 50
    min_defense_strength: float = 0.3
    default_clean_sheet_rate: float = 20.0
    neutral_h2h_avg_goals: float = 2.5
    neutral_h2h_btts_rate: float = 50.0


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(value, upper))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


class PredictionService:
    """
    Domain service for generating match predictions.

    The winner is decided first from form and strength scores, the
    scoreline is derived from expected goals and forced to agree with the
    winner, and BTTS/Over-Under are then read directly off that scoreline.
    """

    def __init__(self, config: Optional[PredictionConfig] = None):
        """Initialize the prediction service."""
        self.config = config or PredictionConfig()

    # ------------------------------------------------------------
    # Form
    # ------------------------------------------------------------

    @staticmethod
    def calculate_form_score(stats: TeamStats) -> float:
        """
        Calculate a 0-100 form score from overall results.

        A team without matches gets the neutral score of 50.
        """
        if stats.matches_played == 0:
            return NEUTRAL_FORM

        win_rate = stats.wins / stats.matches_played * 100
        draw_rate = stats.draws / stats.matches_played * 50
        goal_diff_score = clamp(stats.goal_difference * 5, -25, 25)

        return clamp(win_rate + draw_rate + goal_diff_score, 0, 100)

    @staticmethod
    def _window_form(window: Optional[RecentWindow]) -> float:
        if window is None or window.matches == 0:
            return NEUTRAL_FORM
        return window.form

    def calculate_weighted_form(self, stats: TeamStats) -> float:
        """
        Calculate form score weighted towards recent matches.

        Last 3 matches: 50%, last 5 matches: 30%, overall: 20%.
        """
        overall = self.calculate_form_score(stats) * 0.2
        recent = self._window_form(stats.recent) * 0.3
        last3 = self._window_form(stats.last3) * 0.5
        return overall + recent + last3

    # ------------------------------------------------------------
    # Strength
    # ------------------------------------------------------------

    def calculate_attack_strength(self, stats: TeamStats, is_home: bool) -> float:
        """
        Goals-per-match attack figure for the given venue.

        60% venue-specific (or overall) scoring average, 40% recent
        scoring rate. The recent rate divides the window's goals by its
        wins plus draws plus one; defeats are not counted.
        """
        split = stats.venue(is_home)
        contextual = split.avg_goals_scored if split is not None else stats.avg_goals_scored

        recent_rate = 0.0
        if stats.recent is not None:
            recent_rate = stats.recent.goals_scored / (stats.recent.wins + stats.recent.draws + 1)

        return contextual * 0.6 + recent_rate * 0.4

    def calculate_defense_strength(self, stats: TeamStats, is_home: bool) -> float:
        """
        Goals-conceded-per-match defense figure for the given venue.

        The average is discounted by up to 30% according to the clean-sheet
        rate and floored at 0.3.
        """
        split = stats.venue(is_home)
        contextual = split.avg_goals_conceded if split is not None else stats.avg_goals_conceded

        clean_sheet_rate = stats.clean_sheet_rate
        if clean_sheet_rate is None:
            clean_sheet_rate = self.config.default_clean_sheet_rate

        discounted = contextual * (1 - clean_sheet_rate / 100 * 0.3)
        return max(discounted, self.config.min_defense_strength)

    def calculate_team_strength(self, stats: TeamStats, is_home: bool) -> TeamStrength:
        return TeamStrength(
            attack=self.calculate_attack_strength(stats, is_home),
            defense=self.calculate_defense_strength(stats, is_home),
        )

    # ------------------------------------------------------------
    # Head-to-head
    # ------------------------------------------------------------

    def calculate_h2h_factor(self, h2h: Optional[HeadToHeadSummary]) -> H2HFactor:
        """Small winner-score nudges from the shared history of both teams."""
        if h2h is None or h2h.is_empty:
            return H2HFactor(
                avg_goals=self.config.neutral_h2h_avg_goals,
                btts_rate=self.config.neutral_h2h_btts_rate,
            )

        home_win_rate = h2h.home_wins / h2h.matches_played * 100
        away_win_rate = h2h.away_wins / h2h.matches_played * 100

        return H2HFactor(
            home_bonus=(home_win_rate - 50) / 10,
            away_bonus=(away_win_rate - 50) / 10,
            avg_goals=h2h.avg_goals,
            btts_rate=h2h.btts_percentage,
            has_history=True,
        )

    # ------------------------------------------------------------
    # Winner
    # ------------------------------------------------------------

    def calculate_home_advantage(self, home_stats: TeamStats) -> float:
        """
        Home edge in form points.

        Base edge amplified by the team's own home win rate when known.
        A team without any match history gets no edge (neutral prior).
        """
        if home_stats.matches_played == 0:
            return 0.0

        split = home_stats.home
        if split is None or split.matches == 0:
            return self.config.home_advantage_base

        return self.config.home_advantage_base + (split.win_rate - 50) / 5

    def predict_winner(
        self,
        home_stats: TeamStats,
        away_stats: TeamStats,
        h2h_factor: H2HFactor,
    ) -> WinnerPrediction:
        """Predict Home / Away / Draw from combined form and strength scores."""
        cfg = self.config

        home_form = self.calculate_weighted_form(home_stats)
        away_form = self.calculate_weighted_form(away_stats)
        home_advantage = self.calculate_home_advantage(home_stats)

        home_strength = self.calculate_team_strength(home_stats, is_home=True)
        away_strength = self.calculate_team_strength(away_stats, is_home=False)

        final_home = (
            home_form
            + home_advantage
            + home_strength.attack * 5
            - away_strength.defense * 3
            + h2h_factor.home_bonus
        )
        final_away = (
            away_form
            + away_strength.attack * 5
            - home_strength.defense * 3
            + h2h_factor.away_bonus
        )
        diff = abs(final_home - final_away)

        logger.debug(
            f"Winner scores: {home_stats.team_name} {final_home:.1f} "
            f"(form {home_form:.1f}, advantage {home_advantage:.1f}) vs "
            f"{away_stats.team_name} {final_away:.1f} (form {away_form:.1f})"
        )

        if diff < cfg.draw_threshold:
            return WinnerPrediction(
                prediction=MatchOutcome.DRAW.value,
                confidence=round_half_up(cfg.base_confidence + (cfg.draw_threshold - diff)),
                reasoning=(
                    f"Evenly matched. {home_stats.team_name}: {final_home:.0f} vs "
                    f"{away_stats.team_name}: {final_away:.0f}. "
                    f"Weighted form similar: {home_form:.1f} vs {away_form:.1f}"
                ),
            )

        confidence = round_half_up(min(cfg.base_confidence + diff, cfg.max_winner_confidence))

        if final_home > final_away:
            return WinnerPrediction(
                prediction=MatchOutcome.HOME.value,
                confidence=confidence,
                reasoning=(
                    f"{home_stats.team_name} stronger at home. "
                    f"{self._venue_win_rate_text(home_stats, is_home=True)}. "
                    f"Goal difference: {home_stats.goal_difference:+d}. "
                    f"{self._last3_text(home_stats)}"
                ),
            )

        away_record = away_stats.away.record if away_stats.away is not None else away_stats.record
        return WinnerPrediction(
            prediction=MatchOutcome.AWAY.value,
            confidence=confidence,
            reasoning=(
                f"{away_stats.team_name} in superior form. Away record: {away_record}. "
                f"Goal difference: {away_stats.goal_difference:+d}. "
                f"{self._last3_text(away_stats)}"
            ),
        )

    @staticmethod
    def _venue_win_rate_text(stats: TeamStats, is_home: bool) -> str:
        split = stats.venue(is_home)
        label = "Home" if is_home else "Away"
        if split is None:
            return f"{label} win rate: unknown"
        return f"{label} win rate: {split.win_rate:.0f}%"

    @staticmethod
    def _last3_text(stats: TeamStats) -> str:
        if stats.last3 is None or stats.last3.matches == 0:
            return "No recent matches"
        return f"Recent: {stats.last3.wins}/{stats.last3.matches} wins"

    # ------------------------------------------------------------
    # Scoreline
    # ------------------------------------------------------------

    def calculate_expected_goals(
        self,
        attacking: TeamStats,
        defending: TeamStats,
        is_home: bool,
        winner: str,
    ) -> float:
        """
        Expected goals for one side of this fixture.

        Attack minus half the opponent's defense, scaled up for the
        predicted winner and down for the predicted loser, bounded to
        [0.3, 3.5].
        """
        cfg = self.config
        attack = self.calculate_attack_strength(attacking, is_home)
        opponent_defense = self.calculate_defense_strength(defending, not is_home)

        expected = attack - opponent_defense * 0.5

        side = MatchOutcome.HOME.value if is_home else MatchOutcome.AWAY.value
        if winner == side:
            expected *= cfg.winner_goal_multiplier
        elif winner != MatchOutcome.DRAW.value:
            expected *= cfg.loser_goal_multiplier

        return clamp(expected, cfg.min_expected_goals, cfg.max_expected_goals)

    def predict_scoreline(
        self,
        home_stats: TeamStats,
        away_stats: TeamStats,
        winner: str,
    ) -> ScorelinePrediction:
        """Predict a scoreline that always agrees with the predicted winner."""
        cfg = self.config
        home_expected = self.calculate_expected_goals(home_stats, away_stats, True, winner)
        away_expected = self.calculate_expected_goals(away_stats, home_stats, False, winner)

        home_goals = int(clamp(round_half_up(home_expected), 0, cfg.max_goals))
        away_goals = int(clamp(round_half_up(away_expected), 0, cfg.max_goals))

        # The loser is capped one below max_goals so the winner still fits
        if winner == MatchOutcome.HOME.value and home_goals <= away_goals:
            away_goals = min(away_goals, cfg.max_goals - 1)
            home_goals = away_goals + 1
        elif winner == MatchOutcome.AWAY.value and away_goals <= home_goals:
            home_goals = min(home_goals, cfg.max_goals - 1)
            away_goals = home_goals + 1
        elif winner == MatchOutcome.DRAW.value and home_goals != away_goals:
            home_goals = int(clamp(round_half_up((home_expected + away_expected) / 2), 0, cfg.max_goals))
            away_goals = home_goals

        logger.debug(
            f"Expected goals {home_expected:.2f}-{away_expected:.2f} -> "
            f"scoreline {home_goals}-{away_goals}"
        )

        return ScorelinePrediction(
            home=home_goals,
            away=away_goals,
            confidence=cfg.scoreline_confidence,
        )

    # ------------------------------------------------------------
    # Markets derived from the scoreline
    # ------------------------------------------------------------

    def derive_btts(
        self,
        scoreline: ScorelinePrediction,
        home_stats: TeamStats,
        away_stats: TeamStats,
    ) -> BTTSPrediction:
        """Both Teams To Score, read off the scoreline."""
        cfg = self.config
        both_score = scoreline.home > 0 and scoreline.away > 0

        confidence = float(cfg.btts_base_confidence)
        consistencies = (home_stats.scoring_consistency, away_stats.scoring_consistency)
        has_consistency = all(c is not None for c in consistencies)

        if both_score and has_consistency:
            avg_consistency = sum(consistencies) / 2
            confidence = min(max(confidence, avg_consistency), cfg.btts_max_confidence)

        if both_score:
            consistency_text = (
                f" Teams scored in {sum(consistencies) / 2:.0f}% of matches on average."
                if has_consistency else ""
            )
            reasoning = f"Scoreline {scoreline} shows both teams scoring.{consistency_text}"
        else:
            keeper = away_stats if scoreline.home == 0 else home_stats
            reasoning = (
                f"Scoreline {scoreline} indicates a clean sheet. "
                f"{keeper.team_name} strong defensively."
            )

        return BTTSPrediction(
            prediction="Yes" if both_score else "No",
            confidence=round_half_up(confidence),
            reasoning=reasoning,
        )

    def derive_over_under(
        self,
        scoreline: ScorelinePrediction,
        home_stats: TeamStats,
        away_stats: TeamStats,
        h2h_factor: H2HFactor,
    ) -> OverUnderPrediction:
        """Over/Under 2.5 goals, read off the scoreline."""
        cfg = self.config
        total = scoreline.total
        is_over = total > OVER_UNDER_LINE

        confidence = cfg.over_under_base_confidence
        if total >= 4 or total <= 1:
            confidence = 80
        elif abs(total - OVER_UNDER_LINE) <= 0.5:
            confidence = 55

        if h2h_factor.has_history and (h2h_factor.avg_goals > OVER_UNDER_LINE) == is_over:
            confidence += 5

        combined_avg = home_stats.avg_goals_scored + away_stats.avg_goals_scored
        return OverUnderPrediction(
            prediction="Over 2.5" if is_over else "Under 2.5",
            confidence=min(confidence, cfg.over_under_max_confidence),
            reasoning=(
                f"Predicted {total} total goals ({scoreline}). "
                f"Combined avg: {combined_avg:.2f} goals."
            ),
            expected_goals=float(total),
        )

    # ------------------------------------------------------------
    # Minor markets
    # ------------------------------------------------------------

    def predict_corners(self, home_stats: TeamStats, away_stats: TeamStats) -> CornersPrediction:
        total = round_half_up(home_stats.avg_corners_for + away_stats.avg_corners_for)
        lower = max(total - 2, 6)
        corners_range = CornersRange(min=lower, max=max(total + 2, lower))
        return CornersPrediction(
            prediction=f"{corners_range.min}-{corners_range.max} corners",
            range=corners_range,
            confidence=self.config.corners_confidence,
        )

    @staticmethod
    def predict_bookings(home_stats: TeamStats, away_stats: TeamStats) -> BookingsPrediction:
        """Card level; a red card counts as two yellows."""
        yellow = home_stats.avg_yellow_cards + away_stats.avg_yellow_cards
        red = home_stats.avg_red_cards + away_stats.avg_red_cards
        expected_cards = yellow + red * 2

        if expected_cards < 3:
            level, confidence = "Low", 65
        elif expected_cards < 5:
            level, confidence = "Medium", 70
        else:
            level, confidence = "High", 75

        return BookingsPrediction(
            level=level,
            expected_cards=round(expected_cards, 1),
            confidence=confidence,
        )

    def predict_combo(
        self,
        winner: WinnerPrediction,
        over_under: OverUnderPrediction,
        btts: BTTSPrediction,
    ) -> ComboPrediction:
        parts = []
        if winner.prediction == MatchOutcome.DRAW.value:
            parts.append("Draw")
        else:
            parts.append(f"{winner.prediction} Win")

        parts.append(over_under.prediction)

        if btts.prediction == "Yes":
            parts.append("BTTS")

        return ComboPrediction(
            prediction=" + ".join(parts[:2]),
            confidence=self.config.combo_confidence,
        )

    # ------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------

    def predict_match(
        self,
        home_stats: TeamStats,
        away_stats: TeamStats,
        h2h: Optional[HeadToHeadSummary] = None,
    ) -> MatchPrediction:
        """
        Generate the full prediction bundle for a fixture.

        Args:
            home_stats: Statistics of the team playing at home
            away_stats: Statistics of the visiting team
            h2h: Optional shared history, oriented to this fixture

        Returns:
            MatchPrediction whose BTTS and Over/Under agree with its scoreline
        """
        h2h_factor = self.calculate_h2h_factor(h2h)

        winner = self.predict_winner(home_stats, away_stats, h2h_factor)
        scoreline = self.predict_scoreline(home_stats, away_stats, winner.prediction)

        btts = self.derive_btts(scoreline, home_stats, away_stats)
        over_under = self.derive_over_under(scoreline, home_stats, away_stats, h2h_factor)

        corners = self.predict_corners(home_stats, away_stats)
        bookings = self.predict_bookings(home_stats, away_stats)
        combo = self.predict_combo(winner, over_under, btts)

        overall_confidence = round_half_up(
            (btts.confidence + winner.confidence + over_under.confidence) / 3
        )

        logger.debug(
            f"Prediction {home_stats.team_name} vs {away_stats.team_name}: "
            f"{winner.prediction} ({winner.confidence}%), {scoreline}, "
            f"BTTS {btts.prediction}, {over_under.prediction}"
        )

        return MatchPrediction(
            winner=winner,
            scoreline=scoreline,
            btts=btts,
            over_under=over_under,
            corners=corners,
            bookings=bookings,
            combo=combo,
            overall_confidence=overall_confidence,
        )

    # ------------------------------------------------------------
    # Display payload
    # ------------------------------------------------------------

    @staticmethod
    def build_team_stats_display(stats: TeamStats, is_home: bool) -> TeamStatsDisplay:
        """Format a team's figures for display next to the prediction."""
        split = stats.venue(is_home)
        recent = stats.recent or RecentWindow(matches=0)
        last3 = stats.last3 or RecentWindow(matches=0)
        clean_sheet_rate = stats.clean_sheet_rate or 0.0

        if split is not None:
            venue_record = split.record
            venue_win_rate = split.win_rate
            venue_avg_goals = (
                f"{split.avg_goals_scored:.2f} scored, {split.avg_goals_conceded:.2f} conceded"
            )
        else:
            venue_record = "0W-0D-0L"
            venue_win_rate = 0.0
            venue_avg_goals = "0.00 scored, 0.00 conceded"

        return TeamStatsDisplay(
            name=stats.team_name,
            matches_played=stats.matches_played,
            record=stats.record,
            venue_record=venue_record,
            venue_win_rate=venue_win_rate,
            goals=f"{stats.goals_scored} scored, {stats.goals_conceded} conceded",
            avg_goals=(
                f"{stats.avg_goals_scored:.2f} scored, {stats.avg_goals_conceded:.2f} conceded"
            ),
            venue_avg_goals=venue_avg_goals,
            recent_form=f"{recent.wins}W-{recent.draws}D | {recent.form:.1f}%",
            last3=(
                f"{last3.wins} wins, {last3.goals_scored} scored, "
                f"{last3.goals_conceded} conceded"
            ),
            clean_sheets=f"{stats.clean_sheets} ({clean_sheet_rate:.1f}%)",
            goal_difference=f"{stats.goal_difference:+d}" if stats.goal_difference else "0",
        )

    @staticmethod
    def build_h2h_display(
        h2h: HeadToHeadSummary,
        home_name: str,
        away_name: str,
    ) -> HeadToHeadDisplay:
        return HeadToHeadDisplay(
            matches_played=h2h.matches_played,
            distribution=(
                f"{home_name}: {h2h.home_wins} | {away_name}: {h2h.away_wins} | "
                f"Draws: {h2h.draws}"
            ),
            avg_goals=h2h.avg_goals,
            btts_percentage=h2h.btts_percentage,
        )
