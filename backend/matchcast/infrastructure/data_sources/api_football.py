"""
API-Football Data Source

This module integrates with API-Football (api-football.com) for team season
statistics, league standings, head-to-head history, bookmaker odds and
upcoming fixtures. Free tier: 100 requests/day.

Works against the api-sports host directly or through RapidAPI.

API Documentation: https://www.api-football.com/documentation-v3
"""

import os
from datetime import datetime
from typing import Any, Optional
from dataclasses import dataclass
import logging

import httpx

from matchcast.domain.entities.entities import (
    Fixture,
    LeagueStandingsSnapshot,
    StandingsEntry,
    TeamSeasonStatistics,
)
from matchcast.domain.exceptions import UpstreamFetchError
from matchcast.domain.repositories.repositories import FixtureProvider, StatisticsProvider
from matchcast.domain.value_objects.value_objects import MarketOdds
from matchcast.infrastructure.cache.cache_service import CacheService
from matchcast.utils.time_utils import get_current_time, get_timezone, get_timezone_name


logger = logging.getLogger(__name__)

RAPIDAPI_HOST = "api-football-v1.p.rapidapi.com"
BET365_BOOKMAKER_ID = 8
CACHE_NAMESPACE = "api_football"


@dataclass
class APIFootballConfig:
    """Configuration for API-Football."""
    api_key: Optional[str] = None
    rapidapi_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: Optional[int] = None
    daily_limit: Optional[int] = None

    def __post_init__(self):
        # Try to get credentials from environment if not provided
        if self.api_key is None:
            self.api_key = os.getenv("API_FOOTBALL_KEY")
        if self.rapidapi_key is None:
            self.rapidapi_key = os.getenv("RAPIDAPI_KEY")
        if self.base_url is None:
            if self.uses_rapidapi:
                self.base_url = f"https://{RAPIDAPI_HOST}/v3"
            else:
                self.base_url = "https://v3.football.api-sports.io"
        if self.timeout is None:
            self.timeout = int(os.getenv("API_FOOTBALL_TIMEOUT", "30"))
        if self.daily_limit is None:
            self.daily_limit = int(os.getenv("API_FOOTBALL_DAILY_LIMIT", "100"))

    @property
    def uses_rapidapi(self) -> bool:
        return not self.api_key and bool(self.rapidapi_key)

    @property
    def headers(self) -> dict[str, str]:
        if self.uses_rapidapi:
            return {
                "x-rapidapi-key": self.rapidapi_key,
                "x-rapidapi-host": RAPIDAPI_HOST,
            }
        return {"x-apisports-key": self.api_key or ""}


def _as_int(value: Any) -> int:
    """API-Football reports missing counters as null."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _venue_split(block: Any) -> tuple[int, int, int]:
    """Read a {home, away, total} counter block."""
    if not isinstance(block, dict):
        return 0, 0, 0
    return _as_int(block.get("home")), _as_int(block.get("away")), _as_int(block.get("total"))


class APIFootballSource(StatisticsProvider, FixtureProvider):
    """
    Data source for API-Football.

    Every read goes through the injected cache first. Required lookups
    (team statistics, standings, fixtures) raise UpstreamFetchError; optional
    lookups (head-to-head, odds) degrade to an empty value.
    """

    SOURCE_NAME = "API-Football"

    def __init__(
        self,
        config: Optional[APIFootballConfig] = None,
        cache: Optional[CacheService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the data source.

        Args:
            config: Credentials and limits, read from the environment by default
            cache: Read-through response cache; no caching when omitted
            transport: Custom httpx transport, used by tests
        """
        self.config = config or APIFootballConfig()
        self.cache = cache
        self._transport = transport
        self._request_count = 0
        self._last_reset = get_current_time().date()

    @property
    def is_configured(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.config.api_key or self.config.rapidapi_key)

    def _check_rate_limit(self) -> bool:
        """Check if we're within the daily request budget."""
        today = get_current_time().date()
        if today > self._last_reset:
            self._request_count = 0
            self._last_reset = today
        return self._request_count < self.config.daily_limit

    def get_remaining_requests(self) -> int:
        """Get number of remaining API requests for today."""
        self._check_rate_limit()
        return max(0, self.config.daily_limit - self._request_count)

    async def _make_request(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """
        Make authenticated request to API-Football.

        Args:
            endpoint: API endpoint (e.g., "/fixtures")
            params: Query parameters

        Returns:
            JSON response body

        Raises:
            UpstreamFetchError: Missing key, budget exhausted, HTTP or network
                failure, or an API-level error payload
        """
        if not self.is_configured:
            raise UpstreamFetchError("API-Football not configured (no API key)")

        if not self._check_rate_limit():
            raise UpstreamFetchError(
                f"API-Football daily request limit reached ({self.config.daily_limit}/day)"
            )

        url = f"{self.config.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    url,
                    headers=self.config.headers,
                    params=params,
                    timeout=self.config.timeout,
                )
                self._request_count += 1
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"API-Football HTTP error on {endpoint}: {e}")
            raise UpstreamFetchError(
                f"API-Football returned HTTP {e.response.status_code} for {endpoint}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"API-Football request error on {endpoint}: {e}")
            raise UpstreamFetchError(f"API-Football request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise UpstreamFetchError(f"API-Football sent invalid JSON for {endpoint}") from e

        if not isinstance(data, dict):
            raise UpstreamFetchError(
                f"API-Football sent a {type(data).__name__} body for {endpoint}, expected an object"
            )

        # The API answers 200 with an "errors" list/dict on bad parameters or quota
        if data.get("errors"):
            logger.error(f"API-Football error: {data['errors']}")
            raise UpstreamFetchError(f"API-Football error on {endpoint}: {data['errors']}")

        return data

    async def _cached_request(self, endpoint: str, params: dict, ttl_seconds: int) -> dict:
        """Read-through wrapper around _make_request. Only successes are cached."""
        key = CacheService.make_key(CACHE_NAMESPACE, endpoint, params)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for {key}")
                return cached

        data = await self._make_request(endpoint, params)

        if self.cache is not None:
            self.cache.set(key, data, ttl_seconds)
        return data

    async def get_team_statistics(
        self,
        team_id: int,
        league_id: int,
        season: int,
    ) -> TeamSeasonStatistics:
        """
        Get a team's statistics for a league season.

        Raises:
            UpstreamFetchError: Fetch failed or the provider has no data
        """
        params = {"team": team_id, "league": league_id, "season": season}
        data = await self._cached_request("/teams/statistics", params, CacheService.TTL_STATISTICS)

        payload = data.get("response")
        if not payload or not isinstance(payload, dict):
            raise UpstreamFetchError(
                f"No statistics for team {team_id} in league {league_id}, season {season}"
            )
        return self._parse_team_statistics(payload, team_id)

    def _parse_team_statistics(self, payload: dict, team_id: int) -> TeamSeasonStatistics:
        """Parse a /teams/statistics response into TeamSeasonStatistics."""
        team = _as_dict(payload.get("team"))
        played = _as_dict(payload.get("fixtures")).get("played")
        goals = _as_dict(payload.get("goals"))

        def goal_block(side: str) -> Any:
            block = _as_dict(goals.get(side))
            # Current payloads nest the venue split under "total"
            if isinstance(block.get("total"), dict):
                return block["total"]
            return block

        played_home, played_away, played_total = _venue_split(played)
        for_home, for_away, for_total = _venue_split(goal_block("for"))
        against_home, against_away, against_total = _venue_split(goal_block("against"))

        return TeamSeasonStatistics(
            team_id=team.get("id") or team_id,
            team_name=team.get("name") or f"Team {team_id}",
            played_home=played_home,
            played_away=played_away,
            played_total=played_total,
            goals_for_home=for_home,
            goals_for_away=for_away,
            goals_for_total=for_total,
            goals_against_home=against_home,
            goals_against_away=against_away,
            goals_against_total=against_total,
            form=payload.get("form") or "",
        )

    async def get_standings(self, league_id: int, season: int) -> LeagueStandingsSnapshot:
        """
        Get the league table for a season, all groups included.

        Raises:
            UpstreamFetchError: Fetch failed or no table is published
        """
        params = {"league": league_id, "season": season}
        data = await self._cached_request("/standings", params, CacheService.TTL_STANDINGS)

        groups = []
        for group in self._standings_groups(data):
            groups.append(tuple(self._parse_standings_row(row) for row in group if isinstance(row, dict)))

        if not groups:
            raise UpstreamFetchError(f"No standings found for league {league_id} season {season}")

        return LeagueStandingsSnapshot(league_id=league_id, season=season, groups=tuple(groups))

    @staticmethod
    def _first_item(data: dict) -> dict:
        """First element of the "response" list, or {} when it is missing or malformed."""
        response = data.get("response")
        if isinstance(response, list) and response and isinstance(response[0], dict):
            return response[0]
        return {}

    @classmethod
    def _standings_groups(cls, data: dict) -> list[list]:
        league = cls._first_item(data).get("league")
        if not isinstance(league, dict) or not isinstance(league.get("standings"), list):
            return []
        return [group for group in league["standings"] if isinstance(group, list)]

    @staticmethod
    def _parse_standings_row(row: dict) -> StandingsEntry:
        totals = _as_dict(row.get("all"))
        goals = _as_dict(totals.get("goals"))
        return StandingsEntry(
            team_id=_as_dict(row.get("team")).get("id", 0),
            played=_as_int(totals.get("played")),
            goals_for=_as_int(goals.get("for")),
            goals_against=_as_int(goals.get("against")),
        )

    async def get_head_to_head(self, team_a_id: int, team_b_id: int) -> list[dict]:
        """
        Get past fixtures between two teams.

        Returns:
            Raw fixture dicts, or an empty list when the lookup fails
        """
        params = {"h2h": f"{team_a_id}-{team_b_id}"}
        try:
            data = await self._cached_request(
                "/fixtures/headtohead", params, CacheService.TTL_HEAD_TO_HEAD
            )
        except UpstreamFetchError as e:
            logger.warning(f"Head-to-head lookup {team_a_id}-{team_b_id} failed: {e}")
            return []
        response = data.get("response")
        if not isinstance(response, list):
            return []
        return [item for item in response if isinstance(item, dict)]

    async def get_odds(self, fixture_id: int) -> Optional[MarketOdds]:
        """
        Get Bet365 match-winner odds for a fixture.

        Returns:
            MarketOdds or None when unavailable
        """
        params = {"fixture": fixture_id, "bookmaker": BET365_BOOKMAKER_ID}
        try:
            data = await self._cached_request("/odds", params, CacheService.TTL_ODDS)
        except UpstreamFetchError as e:
            logger.warning(f"Odds lookup for fixture {fixture_id} failed: {e}")
            return None
        return self._parse_odds(data, fixture_id)

    @classmethod
    def _parse_odds(cls, data: dict, fixture_id: int) -> Optional[MarketOdds]:
        bookmakers = cls._first_item(data).get("bookmakers")
        if not isinstance(bookmakers, list) or not bookmakers or not isinstance(bookmakers[0], dict):
            return None

        # Find Match Winner bet type
        for bet in bookmakers[0].get("bets") or []:
            if not isinstance(bet, dict) or bet.get("name") != "Match Winner":
                continue
            try:
                values = {v["value"]: float(v["odd"]) for v in bet.get("values", [])}
                return MarketOdds(home=values["Home"], draw=values["Draw"], away=values["Away"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Unusable Match Winner odds for fixture {fixture_id}: {e}")
                return None
        return None

    async def get_fixtures_payload(self, league_id: int, season: int, next_n: int = 10) -> dict:
        """
        Raw /fixtures payload for the next fixtures of a league.

        Raises:
            UpstreamFetchError: Fetch failed
        """
        params = {
            "league": league_id,
            "season": season,
            "next": next_n,
            "timezone": get_timezone_name(),
        }
        return await self._cached_request("/fixtures", params, CacheService.TTL_FIXTURES)

    async def get_upcoming_fixtures(
        self,
        league_id: int,
        season: int,
        next_n: int = 10,
    ) -> list[Fixture]:
        """
        Get upcoming fixtures for a league.

        Args:
            league_id: API-Football league id
            season: Season year (e.g., 2025)
            next_n: Number of fixtures to return

        Returns:
            List of Fixture entities
        """
        data = await self.get_fixtures_payload(league_id, season, next_n)
        fixtures = []
        response = data.get("response")
        for item in response if isinstance(response, list) else []:
            if not isinstance(item, dict):
                continue
            fixture = self._parse_fixture(item, season)
            if fixture is not None:
                fixtures.append(fixture)

        logger.info(f"Fetched {len(fixtures)} upcoming fixtures for league {league_id}")
        return fixtures

    def _parse_fixture(self, fixture_data: dict, season: int) -> Optional[Fixture]:
        """Parse API-Football fixture into a Fixture entity."""
        fixture = _as_dict(fixture_data.get("fixture"))
        league = _as_dict(fixture_data.get("league"))
        teams = _as_dict(fixture_data.get("teams"))
        home = _as_dict(teams.get("home"))
        away = _as_dict(teams.get("away"))

        if not fixture.get("id") or not home.get("id") or not away.get("id"):
            logger.debug(f"Skipping fixture without ids: {fixture.get('id')}")
            return None

        timestamp = fixture.get("timestamp")
        kickoff = (
            datetime.fromtimestamp(timestamp, get_timezone())
            if isinstance(timestamp, (int, float)) and timestamp
            else None
        )

        return Fixture(
            id=fixture["id"],
            league_id=league.get("id", 0),
            league_name=league.get("name", "Unknown"),
            season=league.get("season") or season,
            home_team_id=home["id"],
            home_team_name=home.get("name", "Unknown"),
            away_team_id=away["id"],
            away_team_name=away.get("name", "Unknown"),
            kickoff=kickoff,
            home_logo=home.get("logo"),
            away_logo=away.get("logo"),
            status=_as_dict(fixture.get("status")).get("short", "NS"),
            raw=fixture_data,
        )
