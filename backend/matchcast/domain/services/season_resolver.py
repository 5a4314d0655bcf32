"""
Season Resolver Module

Early in a season the provider often has no usable statistics yet. The
resolver walks back through previous seasons and picks the most recent one
where both teams and the league table have played matches.
"""

import logging
from dataclasses import replace
from typing import Iterator, Optional

from matchcast.domain.entities.entities import ResolvedSeason
from matchcast.domain.exceptions import NoUsableStatisticsError, UpstreamFetchError
from matchcast.domain.repositories.repositories import StatisticsProvider


logger = logging.getLogger(__name__)

DEFAULT_FLOOR_SEASON = 2015


def candidate_seasons(target: int, floor: int = DEFAULT_FLOOR_SEASON) -> Iterator[int]:
    """
    Yield seasons to try, newest first: target, target - 1, ..., floor.

    Nothing is yielded when the target is older than the floor.
    """
    season = target
    while season >= floor:
        yield season
        season -= 1


def is_sufficient(candidate: ResolvedSeason) -> bool:
    """Both teams have played and at least one league table row has matches."""
    return (
        candidate.home_stats.has_matches
        and candidate.away_stats.has_matches
        and candidate.standings.has_matches
    )


class SeasonResolver:
    """
    Selects the season whose statistics feed the model.

    Seasons are tried one at a time so the search stops at the first
    acceptable one; fetch failures only disqualify that season.
    """

    def __init__(self, provider: StatisticsProvider, floor_season: int = DEFAULT_FLOOR_SEASON):
        self.provider = provider
        self.floor_season = floor_season

    async def _load(
        self,
        season: int,
        home_team_id: int,
        away_team_id: int,
        league_id: int,
    ) -> ResolvedSeason:
        home_stats = await self.provider.get_team_statistics(home_team_id, league_id, season)
        away_stats = await self.provider.get_team_statistics(away_team_id, league_id, season)
        standings = await self.provider.get_standings(league_id, season)
        return ResolvedSeason(
            season=season,
            home_stats=home_stats,
            away_stats=away_stats,
            standings=standings,
        )

    async def resolve(
        self,
        home_team_id: int,
        away_team_id: int,
        league_id: int,
        season: int,
    ) -> ResolvedSeason:
        """
        Find the first candidate season with sufficient statistics.

        Raises:
            NoUsableStatisticsError: No candidate passed, lists every season tried
        """
        attempted: list[int] = []
        accepted: Optional[ResolvedSeason] = None

        for candidate in candidate_seasons(season, self.floor_season):
            attempted.append(candidate)
            logger.info(f"Trying statistics for league {league_id}, season {candidate}...")
            try:
                loaded = await self._load(candidate, home_team_id, away_team_id, league_id)
            except UpstreamFetchError as e:
                logger.warning(
                    f"Statistics fetch failed for league {league_id}, season {candidate}: {e}. "
                    f"Trying next season..."
                )
                continue

            if is_sufficient(loaded):
                accepted = loaded
                break
            logger.info(f"Season {candidate} has no played matches for this fixture, skipping")

        if accepted is None:
            raise NoUsableStatisticsError(attempted)

        logger.info(f"Using statistics from season {accepted.season}")
        return replace(accepted, attempted_seasons=tuple(attempted))
