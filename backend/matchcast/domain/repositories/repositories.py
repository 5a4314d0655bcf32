"""
Domain Repository Interfaces Module

These are abstract interfaces that define how the domain layer accesses data.
Concrete implementations are provided in the infrastructure layer.
This follows the Dependency Inversion Principle (DIP).
"""

from abc import ABC, abstractmethod
from typing import Optional

from matchcast.domain.entities.entities import (
    Fixture,
    LeagueStandingsSnapshot,
    TeamSeasonStatistics,
)
from matchcast.domain.value_objects.value_objects import MarketOdds


class StatisticsProvider(ABC):
    """
    Abstract source of the statistics the prediction engine consumes.

    ``get_team_statistics`` and ``get_standings`` raise
    ``UpstreamFetchError`` on failure. The two enrichment lookups never
    raise: they return an empty list / None instead.
    """

    @abstractmethod
    async def get_team_statistics(
        self,
        team_id: int,
        league_id: int,
        season: int,
    ) -> TeamSeasonStatistics:
        """Get season statistics for a team in a league."""
        pass

    @abstractmethod
    async def get_standings(
        self,
        league_id: int,
        season: int,
    ) -> LeagueStandingsSnapshot:
        """Get the league table for a season."""
        pass

    @abstractmethod
    async def get_head_to_head(
        self,
        team_a_id: int,
        team_b_id: int,
    ) -> list[dict]:
        """Get raw head-to-head fixtures between two teams."""
        pass

    @abstractmethod
    async def get_odds(self, fixture_id: int) -> Optional[MarketOdds]:
        """Get 1X2 market odds for a fixture, or None if unavailable."""
        pass


class FixtureProvider(ABC):
    """Abstract source of upcoming fixtures."""

    @abstractmethod
    async def get_upcoming_fixtures(
        self,
        league_id: int,
        season: int,
        next_n: int = 10,
    ) -> list[Fixture]:
        """Get the next fixtures of a league."""
        pass
