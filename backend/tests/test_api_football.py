"""
Unit Tests for the API-Football data source

Upstream responses are served by httpx.MockTransport.
"""

import asyncio

import httpx
import pytest

from matchcast.domain.exceptions import UpstreamFetchError
from matchcast.infrastructure.data_sources.api_football import (
    APIFootballConfig,
    APIFootballSource,
    RAPIDAPI_HOST,
)


TEAM_STATISTICS = {
    "errors": [],
    "response": {
        "team": {"id": 33, "name": "Manchester United"},
        "form": "WDLWW",
        "fixtures": {"played": {"home": 10, "away": 9, "total": 19}},
        "goals": {
            "for": {"total": {"home": 18, "away": 11, "total": 29}},
            "against": {"total": {"home": 8, "away": 14, "total": 22}},
        },
    },
}

STANDINGS = {
    "errors": [],
    "response": [{
        "league": {
            "id": 15,
            "standings": [
                [{"team": {"id": 1}, "all": {"played": 3, "goals": {"for": 5, "against": 2}}}],
                [
                    {"team": {"id": 2}, "all": {"played": 3, "goals": {"for": 4, "against": 4}}},
                    {"team": {"id": 3}, "all": {"played": 3, "goals": {"for": 1, "against": 4}}},
                ],
            ],
        },
    }],
}

ODDS = {
    "errors": [],
    "response": [{
        "bookmakers": [{
            "id": 8,
            "name": "Bet365",
            "bets": [
                {"id": 5, "name": "Goals Over/Under", "values": [{"value": "Over 2.5", "odd": "1.80"}]},
                {"id": 1, "name": "Match Winner", "values": [
                    {"value": "Home", "odd": "1.95"},
                    {"value": "Draw", "odd": "3.40"},
                    {"value": "Away", "odd": "4.10"},
                ]},
            ],
        }],
    }],
}

FIXTURES = {
    "errors": [],
    "response": [
        {
            "fixture": {"id": 1001, "timestamp": 1749931200, "status": {"short": "NS"}},
            "league": {"id": 253, "name": "Major League Soccer", "season": 2025},
            "teams": {
                "home": {"id": 1600, "name": "LA Galaxy", "logo": "https://img/1600.png"},
                "away": {"id": 1602, "name": "Seattle Sounders", "logo": "https://img/1602.png"},
            },
            "goals": {"home": None, "away": None},
        },
        {"fixture": {"id": 1002}, "league": {"id": 253}, "teams": {}},
    ],
}


class RecordingTransport:
    """Wraps a handler and keeps every request it served."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _source(handler, cache=None, **config_kwargs):
    recorder = RecordingTransport(handler)
    config = APIFootballConfig(api_key="test-key", daily_limit=100, **config_kwargs)
    return APIFootballSource(config=config, cache=cache, transport=recorder.transport), recorder


def _json(payload, status_code=200):
    return lambda request: httpx.Response(status_code, json=payload)


class TestAPIFootballConfig:
    """Tests for APIFootballConfig."""

    def test_api_sports_headers(self):
        config = APIFootballConfig(api_key="abc")
        assert config.base_url == "https://v3.football.api-sports.io"
        assert config.headers == {"x-apisports-key": "abc"}

    def test_rapidapi(self, monkeypatch):
        monkeypatch.delenv("API_FOOTBALL_KEY", raising=False)
        config = APIFootballConfig(rapidapi_key="xyz")

        assert config.uses_rapidapi
        assert config.base_url == f"https://{RAPIDAPI_HOST}/v3"
        assert config.headers == {"x-rapidapi-key": "xyz", "x-rapidapi-host": RAPIDAPI_HOST}

    def test_limits_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_FOOTBALL_TIMEOUT", "12")
        monkeypatch.setenv("API_FOOTBALL_DAILY_LIMIT", "7500")
        config = APIFootballConfig(api_key="abc")

        assert config.timeout == 12
        assert config.daily_limit == 7500


class TestStatistics:
    """Tests for team statistics and standings."""

    def test_team_statistics(self):
        source, recorder = _source(_json(TEAM_STATISTICS))
        stats = asyncio.run(source.get_team_statistics(33, 39, 2024))

        request = recorder.requests[0]
        assert request.url.path == "/teams/statistics"
        assert dict(request.url.params) == {"team": "33", "league": "39", "season": "2024"}
        assert request.headers["x-apisports-key"] == "test-key"

        assert stats.team_name == "Manchester United"
        assert (stats.played_home, stats.played_away, stats.played_total) == (10, 9, 19)
        assert (stats.goals_for_home, stats.goals_for_away) == (18, 11)
        assert (stats.goals_against_home, stats.goals_against_total) == (8, 22)
        assert stats.form == "WDLWW"

    def test_team_statistics_flat_goal_blocks(self):
        payload = {
            "response": {
                "team": {"id": 7, "name": "Flat FC"},
                "fixtures": {"played": {"home": 2, "away": 2, "total": 4}},
                "goals": {"for": {"home": 3, "away": 1, "total": 4}, "against": {"home": None}},
            },
        }
        source, _ = _source(_json(payload))
        stats = asyncio.run(source.get_team_statistics(7, 1, 2025))

        assert stats.goals_for_home == 3
        assert stats.goals_against_home == 0
        assert stats.form == ""

    def test_empty_statistics_raise(self):
        source, _ = _source(_json({"errors": [], "response": []}))
        with pytest.raises(UpstreamFetchError):
            asyncio.run(source.get_team_statistics(33, 39, 2025))

    def test_api_errors_raise(self):
        source, _ = _source(_json({"errors": {"season": "Invalid season"}, "response": []}))
        with pytest.raises(UpstreamFetchError, match="Invalid season"):
            asyncio.run(source.get_team_statistics(33, 39, 1900))

    def test_http_errors_raise(self):
        source, _ = _source(_json({"message": "boom"}, status_code=500))
        with pytest.raises(UpstreamFetchError, match="HTTP 500"):
            asyncio.run(source.get_standings(39, 2025))

    def test_network_errors_raise(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source, _ = _source(handler)
        with pytest.raises(UpstreamFetchError):
            asyncio.run(source.get_standings(39, 2025))

    def test_standings_keep_every_group(self):
        source, _ = _source(_json(STANDINGS))
        snapshot = asyncio.run(source.get_standings(15, 2025))

        assert len(snapshot.groups) == 2
        assert [entry.team_id for entry in snapshot.entries] == [1, 2, 3]
        assert snapshot.entries[0].goals_for == 5

    def test_missing_standings_raise(self):
        source, _ = _source(_json({"errors": [], "response": []}))
        with pytest.raises(UpstreamFetchError):
            asyncio.run(source.get_standings(15, 2025))

    def test_not_configured(self):
        source = APIFootballSource(config=APIFootballConfig(api_key="", rapidapi_key=""))
        with pytest.raises(UpstreamFetchError, match="not configured"):
            asyncio.run(source.get_standings(39, 2025))

    def test_daily_limit(self):
        source, recorder = _source(_json(STANDINGS))
        source.config.daily_limit = 1

        asyncio.run(source.get_standings(15, 2025))
        with pytest.raises(UpstreamFetchError, match="limit"):
            asyncio.run(source.get_standings(15, 2024))
        assert len(recorder.requests) == 1
        assert source.get_remaining_requests() == 0


class TestOptionalLookups:
    """Head-to-head and odds never raise."""

    def test_head_to_head(self):
        payload = {"errors": [], "response": [{"fixture": {"id": 1}}, {"fixture": {"id": 2}}]}
        source, recorder = _source(_json(payload))
        fixtures = asyncio.run(source.get_head_to_head(33, 40))

        assert len(fixtures) == 2
        assert recorder.requests[0].url.path == "/fixtures/headtohead"
        assert recorder.requests[0].url.params["h2h"] == "33-40"

    def test_head_to_head_failure_is_empty(self):
        source, _ = _source(_json({}, status_code=503))
        assert asyncio.run(source.get_head_to_head(33, 40)) == []

    def test_odds(self):
        source, recorder = _source(_json(ODDS))
        odds = asyncio.run(source.get_odds(1001))

        assert recorder.requests[0].url.params["bookmaker"] == "8"
        assert (odds.home, odds.draw, odds.away) == (1.95, 3.4, 4.1)

    def test_odds_unavailable(self):
        source, _ = _source(_json({"errors": [], "response": []}))
        assert asyncio.run(source.get_odds(1001)) is None

    def test_incomplete_match_winner_market(self):
        payload = {"response": [{"bookmakers": [{"bets": [
            {"name": "Match Winner", "values": [{"value": "Home", "odd": "1.95"}]},
        ]}]}]}
        source, _ = _source(_json(payload))
        assert asyncio.run(source.get_odds(1001)) is None

    def test_odds_failure_is_none(self):
        source, _ = _source(_json({}, status_code=429))
        assert asyncio.run(source.get_odds(1001)) is None


class TestMalformedResponses:
    """Well-formed HTTP with an unexpected JSON shape."""

    @pytest.mark.parametrize("body", [[], ["unexpected"], "maintenance", 42])
    def test_non_object_body_raises_upstream_error(self, body):
        source, _ = _source(_json(body))
        with pytest.raises(UpstreamFetchError, match="expected an object"):
            asyncio.run(source.get_team_statistics(33, 39, 2025))

    @pytest.mark.parametrize("body", [[], "maintenance"])
    def test_optional_lookups_degrade(self, body):
        source, _ = _source(_json(body))

        assert asyncio.run(source.get_head_to_head(33, 40)) == []
        assert asyncio.run(source.get_odds(1001)) is None

    def test_non_dict_response_elements(self):
        source, _ = _source(_json({"errors": [], "response": ["oops", 7]}))

        with pytest.raises(UpstreamFetchError):
            asyncio.run(source.get_standings(15, 2025))
        assert asyncio.run(source.get_odds(1001)) is None
        assert asyncio.run(source.get_head_to_head(33, 40)) == []
        assert asyncio.run(source.get_upcoming_fixtures(253, 2025)) == []

    def test_nested_blocks_of_the_wrong_type(self):
        payload = {"response": [{"league": {"standings": [["row", {"team": "x", "all": 3}]]}}]}
        source, _ = _source(_json(payload))

        snapshot = asyncio.run(source.get_standings(15, 2025))

        assert [entry.team_id for entry in snapshot.entries] == [0]
        assert snapshot.has_matches is False


class TestFixtures:
    """Tests for upcoming fixtures."""

    def test_upcoming_fixtures(self, monkeypatch):
        monkeypatch.setenv("FIXTURES_TIMEZONE", "America/Mexico_City")
        source, recorder = _source(_json(FIXTURES))
        fixtures = asyncio.run(source.get_upcoming_fixtures(253, 2025, next_n=5))

        params = recorder.requests[0].url.params
        assert params["next"] == "5"
        assert params["timezone"] == "America/Mexico_City"

        assert len(fixtures) == 1
        fixture = fixtures[0]
        assert fixture.id == 1001
        assert fixture.home_team_name == "LA Galaxy"
        assert fixture.away_team_id == 1602
        assert fixture.home_logo == "https://img/1600.png"
        assert fixture.kickoff.tzinfo is not None
        assert fixture.raw["fixture"]["id"] == 1001


class TestCaching:
    """Read-through caching of upstream responses."""

    def test_second_call_is_served_from_cache(self, memory_cache):
        source, recorder = _source(_json(TEAM_STATISTICS), cache=memory_cache)

        first = asyncio.run(source.get_team_statistics(33, 39, 2024))
        second = asyncio.run(source.get_team_statistics(33, 39, 2024))

        assert first == second
        assert len(recorder.requests) == 1

    def test_different_parameters_are_not_shared(self, memory_cache):
        source, recorder = _source(_json(TEAM_STATISTICS), cache=memory_cache)

        asyncio.run(source.get_team_statistics(33, 39, 2024))
        asyncio.run(source.get_team_statistics(33, 39, 2023))

        assert len(recorder.requests) == 2

    def test_failures_are_not_cached(self, memory_cache):
        responses = iter([
            httpx.Response(500, json={}),
            httpx.Response(200, json=STANDINGS),
        ])
        source, recorder = _source(lambda request: next(responses), cache=memory_cache)

        with pytest.raises(UpstreamFetchError):
            asyncio.run(source.get_standings(15, 2025))
        snapshot = asyncio.run(source.get_standings(15, 2025))

        assert snapshot.has_matches
        assert len(recorder.requests) == 2
