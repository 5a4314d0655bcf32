"""
Domain Entities Module

This module contains the core domain entities for the match forecasting system.
These entities represent the statistics the model consumes and are independent
of any infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from enum import Enum

from matchcast.domain.value_objects.value_objects import (
    GoalExpectancy,
    MarketOdds,
    OutcomeProbabilities,
)


class MatchOutcome(Enum):
    """Possible outcomes of a football match."""
    HOME_WIN = "home_win"
    DRAW = "draw"
    AWAY_WIN = "away_win"


@dataclass(frozen=True)
class TeamSeasonStatistics:
    """
    Season statistics for one team in one league.

    Attributes:
        team_id: Provider team identifier
        team_name: Display name
        played_home / played_away / played_total: Matches played per venue
        goals_for_*: Goals scored per venue
        goals_against_*: Goals conceded per venue
        form: Recent results as W/D/L letters, oldest first
    """
    team_id: int
    team_name: str
    played_home: int = 0
    played_away: int = 0
    played_total: int = 0
    goals_for_home: int = 0
    goals_for_away: int = 0
    goals_for_total: int = 0
    goals_against_home: int = 0
    goals_against_away: int = 0
    goals_against_total: int = 0
    form: str = ""

    @property
    def has_matches(self) -> bool:
        """Whether the team has played at least one match in the season."""
        return self.played_total > 0


@dataclass(frozen=True)
class StandingsEntry:
    """One team's aggregate row in a league table."""
    team_id: int
    played: int
    goals_for: int
    goals_against: int


@dataclass(frozen=True)
class LeagueStandingsSnapshot:
    """
    League table for a season.

    Most leagues have one group; cup competitions can have several.
    """
    league_id: int
    season: int
    groups: tuple[tuple[StandingsEntry, ...], ...] = ()

    @property
    def entries(self) -> list[StandingsEntry]:
        return [entry for group in self.groups for entry in group]

    @property
    def has_matches(self) -> bool:
        """Whether any team in any group has played a match."""
        return any(entry.played > 0 for entry in self.entries)


@dataclass(frozen=True)
class HeadToHeadRecord:
    """
    Head-to-head summary oriented to the current fixture.

    ``home_wins`` counts wins of the current home team regardless of where
    the historical match was played.
    """
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0

    @property
    def total_games(self) -> int:
        return self.home_wins + self.away_wins + self.draws

    def _share(self, count: int) -> float:
        if self.total_games == 0:
            return 0.0
        return count / self.total_games

    @property
    def home_percentage(self) -> float:
        return self._share(self.home_wins)

    @property
    def away_percentage(self) -> float:
        return self._share(self.away_wins)

    @property
    def draw_percentage(self) -> float:
        return self._share(self.draws)


@dataclass(frozen=True)
class ScorelineDistribution:
    """
    Aggregates of a joint Poisson scoreline table.

    ``outcomes`` is normalized; ``both_teams_score`` and ``over_threshold``
    are raw sums over the capped table.
    """
    outcomes: OutcomeProbabilities
    both_teams_score: float
    over_threshold: float
    most_probable_score: tuple[int, int]

    @property
    def under_threshold(self) -> float:
        return 1.0 - self.over_threshold


@dataclass(frozen=True)
class ResolvedSeason:
    """Statistics of the first season that passed the sufficiency check."""
    season: int
    home_stats: TeamSeasonStatistics
    away_stats: TeamSeasonStatistics
    standings: LeagueStandingsSnapshot
    attempted_seasons: tuple[int, ...] = ()


@dataclass(frozen=True)
class Fixture:
    """
    An upcoming match as listed by the statistics provider.
    """
    id: int
    league_id: int
    league_name: str
    season: int
    home_team_id: int
    home_team_name: str
    away_team_id: int
    away_team_name: str
    kickoff: Optional[datetime] = None
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None
    status: str = "NS"
    raw: dict = field(default_factory=dict, compare=False, hash=False, repr=False)


@dataclass(frozen=True)
class MatchForecast:
    """
    Everything computed for one fixture, before formatting.

    ``initial_*`` hold the plain Poisson pass; ``expectancy``/``outcomes``
    are final after blending and ``distribution`` was re-run on the final
    expectancy.
    """
    resolved: ResolvedSeason
    initial_expectancy: GoalExpectancy
    initial_distribution: ScorelineDistribution
    expectancy: GoalExpectancy
    outcomes: OutcomeProbabilities
    distribution: ScorelineDistribution
    head_to_head: Optional[HeadToHeadRecord] = None
    market_odds: Optional[MarketOdds] = None
    signals: tuple[str, ...] = ()

    @property
    def home_stats(self) -> TeamSeasonStatistics:
        return self.resolved.home_stats

    @property
    def away_stats(self) -> TeamSeasonStatistics:
        return self.resolved.away_stats
