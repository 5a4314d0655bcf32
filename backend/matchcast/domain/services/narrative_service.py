"""
Narrative Service Module

Turns the final numbers of a forecast into the advisory sentence and the
side-by-side comparison percentages shown to users. Pure formatting, no I/O.
"""

from typing import Optional

from matchcast.domain.entities.entities import (
    HeadToHeadRecord,
    MatchOutcome,
    ScorelineDistribution,
    TeamSeasonStatistics,
)
from matchcast.domain.services.statistics_service import StatisticsService
from matchcast.domain.value_objects.value_objects import GoalExpectancy, OutcomeProbabilities
from matchcast.utils.math_utils import format_percent

DRAW_LABEL = "Draw"
REMARK_THRESHOLD = 0.5


class NarrativeService:

    @staticmethod
    def pick_outcome(outcomes: OutcomeProbabilities) -> MatchOutcome:
        """
        Most likely outcome.

        Ties resolve in home, away, draw order.
        """
        best = max(outcomes.home_win, outcomes.away_win, outcomes.draw)
        if best == outcomes.home_win:
            return MatchOutcome.HOME_WIN
        if best == outcomes.away_win:
            return MatchOutcome.AWAY_WIN
        return MatchOutcome.DRAW

    def winner_label(
        self,
        outcomes: OutcomeProbabilities,
        home_name: str,
        away_name: str,
    ) -> str:
        outcome = self.pick_outcome(outcomes)
        if outcome == MatchOutcome.HOME_WIN:
            return home_name
        if outcome == MatchOutcome.AWAY_WIN:
            return away_name
        return DRAW_LABEL

    def compose_advice(
        self,
        outcomes: OutcomeProbabilities,
        distribution: ScorelineDistribution,
        home_name: str,
        away_name: str,
        season_used: int,
        signals: Optional[list[str]] = None,
    ) -> str:
        """
        Build the advisory sentence.

        Names the favourite, the statistics season, and gives a
        both-teams-to-score and an over/under 2.5 remark.
        """
        outcome = self.pick_outcome(outcomes)
        season_note = f"(statistics from the {season_used} season)"
        if outcome == MatchOutcome.HOME_WIN:
            advice = f"{home_name} is the model's favourite {season_note}."
        elif outcome == MatchOutcome.AWAY_WIN:
            advice = f"{away_name} is the model's favourite {season_note}."
        else:
            advice = f"The model expects a very even match with a high chance of a draw {season_note}."

        if distribution.both_teams_score > REMARK_THRESHOLD:
            advice += " Both teams are expected to score."
        else:
            advice += " One side is likely to keep a clean sheet, or the match ends 0-0."

        if distribution.over_threshold > REMARK_THRESHOLD:
            advice += " More than 2.5 total goals are anticipated."
        else:
            advice += " Fewer than 2.5 total goals are anticipated."

        if signals:
            advice += f" Adjusted with {' and '.join(signals)}."
        return advice

    @staticmethod
    def _split(home_value: float, away_value: float) -> dict[str, str]:
        total = home_value + away_value
        if total <= 0:
            return {"home": "50%", "away": "50%"}
        return {
            "home": format_percent(home_value / total),
            "away": format_percent(away_value / total),
        }

    def build_comparison(
        self,
        home_stats: TeamSeasonStatistics,
        away_stats: TeamSeasonStatistics,
        expectancy: GoalExpectancy,
        poisson_outcomes: OutcomeProbabilities,
        final_outcomes: OutcomeProbabilities,
        head_to_head: Optional[HeadToHeadRecord],
    ) -> dict:
        """
        Comparison block of the prediction record.

        Args:
            home_stats / away_stats: Season statistics actually used
            expectancy: Final expected goals
            poisson_outcomes: 1X2 split of the initial Poisson pass
            final_outcomes: 1X2 split after blending
            head_to_head: Parsed head-to-head record, if any
        """
        home_form = StatisticsService.parse_form(home_stats.form)
        away_form = StatisticsService.parse_form(away_stats.form)

        record = head_to_head or HeadToHeadRecord()
        if record.total_games > 0:
            h2h = {
                "home": format_percent(record.home_percentage),
                "away": format_percent(record.away_percentage),
                "draw": format_percent(record.draw_percentage),
                "totalGames": record.total_games,
            }
        else:
            h2h = {"home": "50%", "away": "50%", "draw": "0%", "totalGames": 0}

        return {
            "form": {
                "home": format_percent(home_form.win_rate),
                "away": format_percent(away_form.win_rate),
            },
            "att": self._split(expectancy.home, expectancy.away),
            "def": self._split(expectancy.away, expectancy.home),
            "poisson_distribution": {
                "home": format_percent(poisson_outcomes.home_win),
                "away": format_percent(poisson_outcomes.away_win),
            },
            "h2h": h2h,
            "goals": self._split(home_stats.goals_for_home, away_stats.goals_for_away),
            "total": {
                "home": format_percent(final_outcomes.home_share),
                "away": format_percent(final_outcomes.away_share),
            },
        }
