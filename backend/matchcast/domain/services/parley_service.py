from typing import List, Optional
from dataclasses import dataclass
from datetime import datetime

from matchcast.domain.entities.entities import Fixture, MatchForecast
from matchcast.domain.entities.parley import Parley, ParleyLeg, PickType


@dataclass
class ParleyConfig:
    winner_threshold: float = 0.75
    over_threshold: float = 0.70
    btts_threshold: float = 0.70
    under_threshold: float = 0.70
    target_legs: int = 3


class ParleyService:
    """
    Domain service for building the parley of the day from forecasts.
    """

    def __init__(self, config: Optional[ParleyConfig] = None):
        self.config = config or ParleyConfig()

    def select_pick(self, fixture: Fixture, forecast: MatchForecast) -> Optional[ParleyLeg]:
        """
        Best qualifying selection for one fixture, or None.

        Markets are checked in a fixed order and the first one over its
        threshold wins: home win, away win, over 2.5, BTTS, under 2.5.
        """
        outcomes = forecast.outcomes
        distribution = forecast.distribution
        cfg = self.config

        if outcomes.home_win >= cfg.winner_threshold:
            pick = (PickType.WINNER, f"{fixture.home_team_name} to win", outcomes.home_win)
        elif outcomes.away_win >= cfg.winner_threshold:
            pick = (PickType.WINNER, f"{fixture.away_team_name} to win", outcomes.away_win)
        elif distribution.over_threshold >= cfg.over_threshold:
            pick = (PickType.TOTAL_GOALS, "Over 2.5 goals", distribution.over_threshold)
        elif distribution.both_teams_score >= cfg.btts_threshold:
            pick = (PickType.BTTS, "Both teams to score: yes", distribution.both_teams_score)
        elif distribution.under_threshold >= cfg.under_threshold:
            pick = (PickType.TOTAL_GOALS, "Under 2.5 goals", distribution.under_threshold)
        else:
            return None

        pick_type, description, confidence = pick
        return ParleyLeg(
            match_id=fixture.id,
            home_team=fixture.home_team_name,
            away_team=fixture.away_team_name,
            competition_name=fixture.league_name,
            pick_type=pick_type,
            pick_description=description,
            confidence=min(confidence, 1.0),
            starting_at=fixture.kickoff,
            home_logo=fixture.home_logo,
            away_logo=fixture.away_logo,
        )

    def build_parley(
        self,
        candidates: List[ParleyLeg],
        created_at: datetime,
    ) -> Optional[Parley]:
        """
        Pick the most confident legs, one per match.

        Returns:
            Parley with exactly ``target_legs`` legs, or None if not enough
            candidates qualify
        """
        ranked = sorted(candidates, key=lambda leg: leg.confidence, reverse=True)

        selected: List[ParleyLeg] = []
        used_matches = set()
        for leg in ranked:
            if len(selected) == self.config.target_legs:
                break
            if leg.match_id in used_matches:
                continue
            selected.append(leg)
            used_matches.add(leg.match_id)

        if len(selected) < self.config.target_legs:
            return None

        return Parley(
            legs=selected,
            parley_id=f"daily-parley-{created_at.strftime('%Y-%m-%d')}",
            created_at=created_at,
        )
