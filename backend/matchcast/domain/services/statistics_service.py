"""
Statistics Domain Service

Derives the secondary signals the model uses from raw provider data:
recent form counts and the head-to-head record.
"""

from datetime import datetime
from typing import List, NamedTuple

from matchcast.domain.entities.entities import HeadToHeadRecord

# Statuses of matches that reached a final result
COMPLETED_STATUSES = {"FT", "AET", "PEN"}
HEAD_TO_HEAD_LIMIT = 10


class FormSummary(NamedTuple):
    wins: int
    draws: int
    losses: int

    @property
    def games(self) -> int:
        return self.wins + self.draws + self.losses

    @property
    def win_rate(self) -> float:
        """Wins plus half the draws over games; 0.5 when no games are recorded."""
        if self.games == 0:
            return 0.5
        return (self.wins + self.draws / 2) / self.games


class StatisticsService:

    @staticmethod
    def parse_form(form: str) -> FormSummary:
        """
        Count W/D/L letters of a form string such as "WWDLW".

        Any other character is ignored.
        """
        if not form:
            return FormSummary(0, 0, 0)
        form = form.upper()
        return FormSummary(form.count("W"), form.count("D"), form.count("L"))

    @staticmethod
    def _block(data: dict, key: str) -> dict:
        value = data.get(key)
        return value if isinstance(value, dict) else {}

    @classmethod
    def _kickoff_timestamp(cls, fixture_data: dict) -> float:
        fixture = cls._block(fixture_data, "fixture")
        timestamp = fixture.get("timestamp")
        if isinstance(timestamp, (int, float)):
            return float(timestamp)
        date_str = fixture.get("date")
        if isinstance(date_str, str) and date_str:
            try:
                return datetime.fromisoformat(date_str.replace("Z", "+00:00")).timestamp()
            except ValueError:
                pass
        return 0.0

    @classmethod
    def _is_completed(cls, fixture_data: dict) -> bool:
        if not isinstance(fixture_data, dict):
            return False
        status = cls._block(cls._block(fixture_data, "fixture"), "status").get("short")
        goals = cls._block(fixture_data, "goals")
        return (
            status in COMPLETED_STATUSES
            and isinstance(goals.get("home"), int)
            and isinstance(goals.get("away"), int)
        )

    @classmethod
    def _team_ids(cls, fixture_data: dict) -> set:
        teams = cls._block(fixture_data, "teams")
        return {
            cls._block(teams, "home").get("id"),
            cls._block(teams, "away").get("id"),
        }

    @classmethod
    def calculate_head_to_head(
        cls,
        fixtures: List[dict],
        home_team_id: int,
        away_team_id: int,
        limit: int = HEAD_TO_HEAD_LIMIT,
    ) -> HeadToHeadRecord:
        """
        Summarize head-to-head history relative to the current fixture.

        Only completed matches count. They are sorted newest first before
        keeping the ``limit`` most recent, so the result does not depend on
        the provider's ordering.

        Args:
            fixtures: Raw API-Football fixtures between both teams
            home_team_id: Home team of the fixture being predicted
            away_team_id: Away team of the fixture being predicted
            limit: Maximum number of encounters considered

        Returns:
            HeadToHeadRecord with wins counted for the current home/away roles
        """
        pair = {home_team_id, away_team_id}
        completed = [
            f for f in fixtures or []
            if cls._is_completed(f) and cls._team_ids(f) == pair
        ]
        completed.sort(key=cls._kickoff_timestamp, reverse=True)

        home_wins = away_wins = draws = 0
        for fixture_data in completed[:limit]:
            goals = fixture_data["goals"]
            fixture_home_id = fixture_data["teams"]["home"]["id"]

            # Re-orient the historical score to the current home team
            if fixture_home_id == home_team_id:
                ours, theirs = goals["home"], goals["away"]
            else:
                ours, theirs = goals["away"], goals["home"]

            if ours > theirs:
                home_wins += 1
            elif ours < theirs:
                away_wins += 1
            else:
                draws += 1

        return HeadToHeadRecord(home_wins=home_wins, away_wins=away_wins, draws=draws)
