"""
Signal Blender Module

Adjusts the Poisson 1X2 split with secondary signals:
- Head-to-head results (weight 0.4, needs at least 3 completed meetings)
- Bookmaker implied probabilities (weight 0.3)

After every stage the expected goals are re-derived from the blended split
so goal expectancy and outcome probabilities stay consistent.
"""

from dataclasses import dataclass
from typing import Optional

from matchcast.domain.entities.entities import HeadToHeadRecord
from matchcast.domain.value_objects.value_objects import (
    GoalExpectancy,
    MarketOdds,
    OutcomeProbabilities,
)
from matchcast.utils.math_utils import LAMBDA_FLOOR, normalize_probabilities

HEAD_TO_HEAD_WEIGHT = 0.4
HEAD_TO_HEAD_MIN_GAMES = 3
MARKET_WEIGHT = 0.3


def redistribute_lambda(
    total_lambda: float,
    home_win: float,
    draw: float,
    away_win: float,
) -> GoalExpectancy:
    """
    Split a total goal expectancy according to an outcome split.

    Each side gets its win probability plus half the draw, as a share of
    the whole split. Both values are floored at 0.1.
    """
    home_win, draw, away_win = normalize_probabilities(home_win, draw, away_win)
    home = total_lambda * (home_win + draw / 2)
    away = total_lambda * (away_win + draw / 2)
    return GoalExpectancy(home=max(LAMBDA_FLOOR, home), away=max(LAMBDA_FLOOR, away))


@dataclass(frozen=True)
class BlendResult:
    outcomes: OutcomeProbabilities
    expectancy: GoalExpectancy
    applied: bool


class SignalBlender:
    """
    Blends model probabilities with head-to-head and market signals.

    Stages return ``applied=False`` and the inputs untouched when their
    signal is missing or too thin.
    """

    def __init__(
        self,
        head_to_head_weight: float = HEAD_TO_HEAD_WEIGHT,
        head_to_head_min_games: int = HEAD_TO_HEAD_MIN_GAMES,
        market_weight: float = MARKET_WEIGHT,
    ):
        self.head_to_head_weight = head_to_head_weight
        self.head_to_head_min_games = head_to_head_min_games
        self.market_weight = market_weight

    @staticmethod
    def _mix(
        model: OutcomeProbabilities,
        signal: tuple[float, float, float],
        weight: float,
    ) -> OutcomeProbabilities:
        home = model.home_win * (1 - weight) + signal[0] * weight
        draw = model.draw * (1 - weight) + signal[1] * weight
        away = model.away_win * (1 - weight) + signal[2] * weight
        return OutcomeProbabilities.of(home, draw, away)

    def _finish(
        self,
        blended: OutcomeProbabilities,
        expectancy: GoalExpectancy,
    ) -> BlendResult:
        new_expectancy = redistribute_lambda(
            expectancy.total, blended.home_win, blended.draw, blended.away_win
        )
        return BlendResult(outcomes=blended, expectancy=new_expectancy, applied=True)

    def blend_head_to_head(
        self,
        outcomes: OutcomeProbabilities,
        expectancy: GoalExpectancy,
        record: Optional[HeadToHeadRecord],
    ) -> BlendResult:
        """
        Stage A: mix in the head-to-head win/draw/loss frequencies.

        Skipped when fewer than ``head_to_head_min_games`` meetings exist.
        """
        if record is None or record.total_games < self.head_to_head_min_games:
            return BlendResult(outcomes=outcomes, expectancy=expectancy, applied=False)

        signal = (record.home_percentage, record.draw_percentage, record.away_percentage)
        blended = self._mix(outcomes, signal, self.head_to_head_weight)
        return self._finish(blended, expectancy)

    def blend_market_odds(
        self,
        outcomes: OutcomeProbabilities,
        expectancy: GoalExpectancy,
        odds: Optional[MarketOdds],
    ) -> BlendResult:
        """
        Stage B: mix in the margin-free bookmaker probabilities.

        Skipped when no odds are available.
        """
        if odds is None:
            return BlendResult(outcomes=outcomes, expectancy=expectancy, applied=False)

        blended = self._mix(outcomes, odds.to_probabilities(), self.market_weight)
        return self._finish(blended, expectancy)
