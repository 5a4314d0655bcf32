"""
Prediction Service Module

This domain service contains the goal model behind every forecast:
1. Attack/defense strengths relative to the league scoring rate
2. Expected goals (Poisson lambdas) for both sides
3. The joint Poisson scoreline table and its aggregate markets

This is a pure domain service with no external dependencies.
"""

import math
import functools
import logging

import numpy as np

from matchcast.domain.entities.entities import (
    LeagueStandingsSnapshot,
    ScorelineDistribution,
    TeamSeasonStatistics,
)
from matchcast.domain.value_objects.value_objects import (
    GoalExpectancy,
    OutcomeProbabilities,
    TeamStrength,
)
from matchcast.utils.math_utils import (
    DEFAULT_AWAY_LAMBDA,
    DEFAULT_HOME_LAMBDA,
    safe_divide,
    safe_lambda,
)


logger = logging.getLogger(__name__)

HOME_ADVANTAGE_FACTOR = 1.2
DEFAULT_LEAGUE_AVERAGE_GOALS = 2.5
MAX_GOALS = 5
GOALS_THRESHOLD = 2.5


class PredictionService:
    """
    Domain service for the Poisson goal model.

    Converts season statistics into expected goals and expected goals into
    scoreline probabilities. Degenerate inputs never raise: zero divisors
    are treated as neutral and non-finite lambdas fall back to fixed
    defaults.
    """

    def calculate_league_average(self, standings: LeagueStandingsSnapshot) -> float:
        """
        Average goals per match across the whole league table.

        Every group of the table is included. Falls back to 2.5 when no
        team has played.
        """
        total_goals = 0
        total_matches = 0
        for entry in standings.entries:
            total_goals += entry.goals_for + entry.goals_against
            total_matches += entry.played

        if total_matches <= 0:
            return DEFAULT_LEAGUE_AVERAGE_GOALS
        return total_goals / total_matches

    def calculate_team_strength(
        self,
        team_stats: TeamSeasonStatistics,
        league_average: float,
        is_home: bool = True,
    ) -> TeamStrength:
        """
        Calculate a team's attacking and defensive strength.

        Only the venue of the fixture is used: home statistics for the home
        side, away statistics for the visitors.

        Args:
            team_stats: Season statistics for the team
            league_average: League goals per match
            is_home: Whether calculating for the home side

        Returns:
            TeamStrength with attack and defense values
        """
        if is_home:
            played = team_stats.played_home
            goals_for = team_stats.goals_for_home
            goals_against = team_stats.goals_against_home
        else:
            played = team_stats.played_away
            goals_for = team_stats.goals_for_away
            goals_against = team_stats.goals_against_away

        attack = safe_divide(safe_divide(goals_for, played), league_average)
        defense = safe_divide(safe_divide(goals_against, played), league_average)
        return TeamStrength(attack_strength=attack, defense_strength=defense)

    def calculate_expected_goals(
        self,
        home_strength: TeamStrength,
        away_strength: TeamStrength,
    ) -> GoalExpectancy:
        """
        Combine strengths into expected goals for both teams.

        Home: home attack x (1 / away defense) x home advantage.
        Away: away attack x (1 / home defense).
        """
        home_expected = (
            home_strength.attack_strength
            * safe_divide(1, away_strength.defense_strength)
            * HOME_ADVANTAGE_FACTOR
        )
        away_expected = (
            away_strength.attack_strength
            * safe_divide(1, home_strength.defense_strength)
        )
        return GoalExpectancy(
            home=safe_lambda(home_expected, DEFAULT_HOME_LAMBDA),
            away=safe_lambda(away_expected, DEFAULT_AWAY_LAMBDA),
        )

    def calculate_goal_expectancy(
        self,
        home_stats: TeamSeasonStatistics,
        away_stats: TeamSeasonStatistics,
        standings: LeagueStandingsSnapshot,
    ) -> GoalExpectancy:
        """Run the full goal model for a fixture."""
        league_average = self.calculate_league_average(standings)
        home_strength = self.calculate_team_strength(home_stats, league_average, is_home=True)
        away_strength = self.calculate_team_strength(away_stats, league_average, is_home=False)

        expectancy = self.calculate_expected_goals(home_strength, away_strength)
        logger.debug(
            f"League avg {league_average:.3f} | home att {home_strength.attack_strength:.3f} "
            f"def {home_strength.defense_strength:.3f} | away att {away_strength.attack_strength:.3f} "
            f"def {away_strength.defense_strength:.3f} | xG {expectancy.home:.2f}-{expectancy.away:.2f}"
        )
        return expectancy

    @staticmethod
    @functools.lru_cache(maxsize=1024)
    def poisson_probability(expected: float, actual: int) -> float:
        """
        Calculate Poisson probability.

        P(X = k) = (λ^k * e^(-λ)) / k!

        Args:
            expected: Expected value (λ)
            actual: Actual value (k)

        Returns:
            Probability of exactly 'actual' events occurring
        """
        if expected <= 0:
            return 0.0 if actual > 0 else 1.0

        return (math.pow(expected, actual) * math.exp(-expected)) / math.factorial(actual)

    @staticmethod
    def _get_poisson_distribution(expected: float, max_goals: int) -> np.ndarray:
        """
        Per-side goal probabilities P(X = 0..max_goals).
        """
        return np.array(
            [PredictionService.poisson_probability(expected, k) for k in range(max_goals + 1)],
            dtype=float,
        )

    def build_score_distribution(
        self,
        expectancy: GoalExpectancy,
        max_goals: int = MAX_GOALS,
        threshold: float = GOALS_THRESHOLD,
    ) -> ScorelineDistribution:
        """
        Build the joint scoreline table and aggregate it.

        Args:
            expectancy: Expected goals for both sides
            max_goals: Goal cap per team (inclusive)
            threshold: Total goals line for over/under

        Returns:
            ScorelineDistribution with a normalized 1X2 split and raw
            BTTS / over probabilities
        """
        home_probs = self._get_poisson_distribution(expectancy.home, max_goals)
        away_probs = self._get_poisson_distribution(expectancy.away, max_goals)

        # matrix[h, a] = P(home scores h) * P(away scores a)
        matrix = np.outer(home_probs, away_probs)
        goals = np.arange(max_goals + 1)
        total_goals = np.add.outer(goals, goals)

        home_win = float(np.tril(matrix, k=-1).sum())
        draw = float(np.trace(matrix))
        away_win = float(np.triu(matrix, k=1).sum())
        both_teams_score = float(matrix[1:, 1:].sum())
        over_threshold = float(matrix[total_goals > threshold].sum())

        # argmax returns the first maximum in row-major order (ascending h, then a)
        best_home, best_away = np.unravel_index(int(np.argmax(matrix)), matrix.shape)

        return ScorelineDistribution(
            outcomes=OutcomeProbabilities.of(home_win, draw, away_win),
            both_teams_score=both_teams_score,
            over_threshold=over_threshold,
            most_probable_score=(int(best_home), int(best_away)),
        )
