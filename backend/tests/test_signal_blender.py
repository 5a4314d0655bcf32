"""
Unit Tests for Signal Blender

Tests the head-to-head and market-odds blend stages.
"""

import pytest

from matchcast.domain.entities.entities import HeadToHeadRecord
from matchcast.domain.services.signal_blender import SignalBlender, redistribute_lambda
from matchcast.domain.value_objects.value_objects import (
    GoalExpectancy,
    MarketOdds,
    OutcomeProbabilities,
)


@pytest.fixture
def blender():
    return SignalBlender()


@pytest.fixture
def outcomes():
    return OutcomeProbabilities.of(0.2, 0.3, 0.5)


@pytest.fixture
def expectancy():
    return GoalExpectancy(home=1.2, away=1.8)


class TestRedistributeLambda:
    """Tests for redistribute_lambda."""

    def test_proportional_split(self):
        result = redistribute_lambda(3.0, 0.5, 0.2, 0.3)
        assert result.home == pytest.approx(1.8)
        assert result.away == pytest.approx(1.2)
        assert result.total == pytest.approx(3.0)

    def test_unnormalized_input(self):
        result = redistribute_lambda(2.0, 2.0, 0.0, 2.0)
        assert result.home == pytest.approx(1.0)
        assert result.away == pytest.approx(1.0)

    def test_floor(self):
        result = redistribute_lambda(2.0, 0.0, 0.0, 1.0)
        assert result.home == 0.1
        assert result.away == pytest.approx(2.0)


class TestHeadToHeadBlend:
    """Tests for Stage A."""

    @pytest.mark.parametrize("games", [0, 1, 2])
    def test_thin_history_leaves_inputs_untouched(self, blender, outcomes, expectancy, games):
        record = HeadToHeadRecord(home_wins=games)
        result = blender.blend_head_to_head(outcomes, expectancy, record)

        assert result.applied is False
        assert result.outcomes is outcomes
        assert result.expectancy is expectancy

    def test_missing_record(self, blender, outcomes, expectancy):
        result = blender.blend_head_to_head(outcomes, expectancy, None)
        assert result.applied is False

    def test_blend_weights(self, blender, outcomes, expectancy):
        record = HeadToHeadRecord(home_wins=2, away_wins=1, draws=1)
        result = blender.blend_head_to_head(outcomes, expectancy, record)

        assert result.applied is True
        assert result.outcomes.home_win == pytest.approx(0.2 * 0.6 + 0.5 * 0.4)
        assert result.outcomes.draw == pytest.approx(0.3 * 0.6 + 0.25 * 0.4)
        assert result.outcomes.away_win == pytest.approx(0.5 * 0.6 + 0.25 * 0.4)
        assert sum(result.outcomes.as_tuple()) == pytest.approx(1.0)

    def test_total_expected_goals_preserved(self, blender, outcomes, expectancy):
        record = HeadToHeadRecord(home_wins=3)
        result = blender.blend_head_to_head(outcomes, expectancy, record)

        assert result.expectancy.total == pytest.approx(expectancy.total)
        assert result.expectancy.home > expectancy.home
        assert result.expectancy.home == pytest.approx(
            expectancy.total * (result.outcomes.home_win + result.outcomes.draw / 2)
        )


class TestMarketBlend:
    """Tests for Stage B."""

    def test_no_odds_leaves_inputs_untouched(self, blender, outcomes, expectancy):
        result = blender.blend_market_odds(outcomes, expectancy, None)

        assert result.applied is False
        assert result.outcomes is outcomes
        assert result.expectancy is expectancy

    def test_blend_weights(self, blender, outcomes, expectancy):
        odds = MarketOdds(home=2.0, draw=4.0, away=4.0)
        result = blender.blend_market_odds(outcomes, expectancy, odds)

        assert result.applied is True
        assert result.outcomes.home_win == pytest.approx(0.29)
        assert result.outcomes.draw == pytest.approx(0.285)
        assert result.outcomes.away_win == pytest.approx(0.425)

    def test_uses_current_total_as_base(self, blender, outcomes):
        after_stage_a = GoalExpectancy(home=2.5, away=0.5)
        odds = MarketOdds(home=1.5, draw=4.0, away=7.0)
        result = blender.blend_market_odds(outcomes, after_stage_a, odds)

        assert result.expectancy.total == pytest.approx(3.0)
