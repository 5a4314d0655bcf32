"""
Shared fixtures: sample season statistics and an in-memory provider.
"""

from typing import Optional

import pytest

from matchcast.domain.entities.entities import (
    Fixture,
    LeagueStandingsSnapshot,
    StandingsEntry,
    TeamSeasonStatistics,
)
from matchcast.domain.exceptions import UpstreamFetchError
from matchcast.domain.repositories.repositories import FixtureProvider, StatisticsProvider
from matchcast.domain.value_objects.value_objects import MarketOdds


class FakeStatisticsProvider(StatisticsProvider, FixtureProvider):
    """
    Serves canned statistics keyed by season.

    Seasons without an entry return a team/table with no matches played.
    """

    def __init__(
        self,
        stats: Optional[dict] = None,
        standings: Optional[dict] = None,
        head_to_head: Optional[list] = None,
        odds: Optional[MarketOdds] = None,
        failing_seasons=(),
        fixtures: Optional[dict] = None,
    ):
        self.stats = stats or {}
        self.standings = standings or {}
        self.head_to_head = head_to_head or []
        self.odds = odds
        self.failing_seasons = set(failing_seasons)
        self.fixtures = fixtures or {}
        self.calls = []

    async def get_team_statistics(self, team_id, league_id, season):
        self.calls.append(("statistics", team_id, season))
        if season in self.failing_seasons:
            raise UpstreamFetchError(f"HTTP 500 for season {season}")
        return self.stats.get(
            (team_id, season),
            TeamSeasonStatistics(team_id=team_id, team_name=f"Team {team_id}"),
        )

    async def get_standings(self, league_id, season):
        self.calls.append(("standings", league_id, season))
        if season in self.failing_seasons:
            raise UpstreamFetchError(f"HTTP 500 for season {season}")
        return self.standings.get(season, LeagueStandingsSnapshot(league_id=league_id, season=season))

    async def get_head_to_head(self, team_a_id, team_b_id):
        self.calls.append(("head_to_head", team_a_id, team_b_id))
        return list(self.head_to_head)

    async def get_odds(self, fixture_id):
        self.calls.append(("odds", fixture_id))
        return self.odds

    async def get_upcoming_fixtures(self, league_id, season, next_n=10):
        self.calls.append(("fixtures", league_id, season))
        fixtures = self.fixtures.get(league_id)
        if isinstance(fixtures, Exception):
            raise fixtures
        return list(fixtures or [])[:next_n]

    def seasons_requested(self) -> list[int]:
        return [call[2] for call in self.calls if call[0] == "standings"]


@pytest.fixture
def provider_class():
    return FakeStatisticsProvider


@pytest.fixture
def home_stats():
    """Home side: 10 home games, 20 scored, 5 conceded."""
    return TeamSeasonStatistics(
        team_id=1,
        team_name="Home FC",
        played_home=10,
        played_away=10,
        played_total=20,
        goals_for_home=20,
        goals_for_away=10,
        goals_for_total=30,
        goals_against_home=5,
        goals_against_away=10,
        goals_against_total=15,
        form="WWDLW",
    )


@pytest.fixture
def away_stats():
    """Away side: 10 away games, 8 scored, 12 conceded."""
    return TeamSeasonStatistics(
        team_id=2,
        team_name="Away FC",
        played_home=10,
        played_away=10,
        played_total=20,
        goals_for_home=15,
        goals_for_away=8,
        goals_for_total=23,
        goals_against_home=10,
        goals_against_away=12,
        goals_against_total=22,
        form="LDWLL",
    )


@pytest.fixture
def standings():
    """A table averaging exactly 2.5 goals per match."""
    return LeagueStandingsSnapshot(
        league_id=39,
        season=2025,
        groups=(
            (
                StandingsEntry(team_id=1, played=10, goals_for=15, goals_against=10),
                StandingsEntry(team_id=2, played=10, goals_for=10, goals_against=15),
            ),
        ),
    )


@pytest.fixture
def make_h2h_fixture():
    """Build a raw API-Football head-to-head fixture."""
    def _make(home_id, away_id, home_goals, away_goals, timestamp, status="FT"):
        return {
            "fixture": {"id": timestamp, "timestamp": timestamp, "status": {"short": status}},
            "teams": {"home": {"id": home_id}, "away": {"id": away_id}},
            "goals": {"home": home_goals, "away": away_goals},
        }
    return _make


@pytest.fixture
def make_fixture():
    """Build an upcoming Fixture entity."""
    def _make(fixture_id, home_id=1, away_id=2, league_id=253, season=2025):
        return Fixture(
            id=fixture_id,
            league_id=league_id,
            league_name="Major League Soccer",
            season=season,
            home_team_id=home_id,
            home_team_name=f"Team {home_id}",
            away_team_id=away_id,
            away_team_name=f"Team {away_id}",
        )
    return _make


@pytest.fixture
def memory_cache(monkeypatch):
    """CacheService without Redis."""
    from matchcast.infrastructure.cache.cache_service import CacheService
    from matchcast.infrastructure.cache.redis_client import RedisConfig, RedisResponseStore

    monkeypatch.delenv("REDIS_HOST", raising=False)
    return CacheService(redis_store=RedisResponseStore(RedisConfig(host="")))
