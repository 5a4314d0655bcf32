import os
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from matchcast.application.dtos.dtos import ParleyDTO, ParleyLegDTO
from matchcast.application.use_cases.predict_match_use_case import PredictMatchUseCase
from matchcast.domain.entities.entities import Fixture
from matchcast.domain.entities.parley import Parley, ParleyLeg
from matchcast.domain.exceptions import PredictionException
from matchcast.domain.repositories.repositories import FixtureProvider
from matchcast.domain.services.parley_service import ParleyService
from matchcast.infrastructure.cache.cache_service import CacheService
from matchcast.utils.math_utils import percent_value, round_half_up
from matchcast.utils.time_utils import get_current_time, get_today_str

logger = logging.getLogger(__name__)

# MLS, FIFA Club World Cup, CONCACAF Gold Cup, Veikkausliiga, J1 League
DEFAULT_PARLEY_LEAGUES = "253:2025,15:2025,22:2025,244:2025,98:2025"


def parse_leagues(value: str) -> list[tuple[int, int]]:
    """Parse "league:season,league:season" into (league, season) pairs."""
    leagues = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        league, _, season = item.partition(":")
        leagues.append((int(league), int(season)))
    return leagues


@dataclass
class ParleyScanConfig:
    """Which leagues the parley scanner looks at."""
    leagues: Optional[List[tuple[int, int]]] = None
    fixtures_per_league: Optional[int] = None
    concurrency: int = 4

    def __post_init__(self):
        if self.leagues is None:
            self.leagues = parse_leagues(os.getenv("PARLEY_LEAGUES", DEFAULT_PARLEY_LEAGUES))
        if self.fixtures_per_league is None:
            self.fixtures_per_league = int(os.getenv("PARLEY_FIXTURES_PER_LEAGUE", "20"))


class GetParleyUseCase:
    """
    Application service for the parley of the day.
    Scans upcoming fixtures of the configured leagues, predicts each one and
    hands the qualifying picks to ParleyService.
    """

    TITLE = "Confidence treble of the day"
    ADVICE = "Our strongest combination today, backed by the model. Play it with a strategy."

    def __init__(
        self,
        fixture_provider: FixtureProvider,
        predict_match_use_case: PredictMatchUseCase,
        parley_service: Optional[ParleyService] = None,
        config: Optional[ParleyScanConfig] = None,
        cache: Optional[CacheService] = None,
    ):
        self.fixture_provider = fixture_provider
        self.predict_match_use_case = predict_match_use_case
        self.parley_service = parley_service or ParleyService()
        self.config = config or ParleyScanConfig()
        self.cache = cache

    async def _collect_fixtures(self) -> List[Fixture]:
        fixtures: List[Fixture] = []
        for league_id, season in self.config.leagues:
            logger.info(f"Scanning fixtures for parley: league {league_id}, season {season}...")
            try:
                fixtures.extend(
                    await self.fixture_provider.get_upcoming_fixtures(
                        league_id, season, self.config.fixtures_per_league
                    )
                )
            except PredictionException as e:
                logger.error(f"Error scanning league {league_id} for parley: {e}")
        return fixtures

    async def _candidate_for(
        self,
        fixture: Fixture,
        semaphore: asyncio.Semaphore,
    ) -> Optional[ParleyLeg]:
        async with semaphore:
            try:
                forecast = await self.predict_match_use_case.forecast(
                    fixture.home_team_id,
                    fixture.away_team_id,
                    fixture.league_id,
                    fixture.season,
                    fixture.id,
                )
            except PredictionException as e:
                logger.warning(f"Prediction failed for fixture {fixture.id}: {e}")
                return None
        return self.parley_service.select_pick(fixture, forecast)

    def _to_dto(self, parley: Parley) -> ParleyDTO:
        legs = [
            ParleyLegDTO(
                match_id=leg.match_id,
                home_team=leg.home_team,
                away_team=leg.away_team,
                home_logo=leg.home_logo,
                away_logo=leg.away_logo,
                competition_name=leg.competition_name,
                starting_at=leg.starting_at,
                pick_type=leg.pick_type.value,
                pick_description=leg.pick_description,
                confidence_percent=percent_value(leg.confidence),
                simulated_individual_odd=float(round_half_up(leg.simulated_odd, 2)),
            )
            for leg in parley.legs
        ]
        return ParleyDTO(
            parley_id=parley.parley_id,
            title=f"{self.TITLE} - {parley.created_at.strftime('%d/%m/%Y')}",
            advice=self.ADVICE,
            legs=legs,
            total_simulated_odd=float(round_half_up(parley.total_odd, 2)),
            total_confidence_percent=percent_value(parley.total_confidence),
        )

    async def execute(self) -> Optional[ParleyDTO]:
        """
        Build today's parley.

        Returns:
            ParleyDTO, or None when fewer legs than required qualify
        """
        now = get_current_time()
        cache_key = f"parley:{get_today_str()}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return ParleyDTO.model_validate(cached)

        fixtures = await self._collect_fixtures()
        semaphore = asyncio.Semaphore(self.config.concurrency)
        picks = await asyncio.gather(
            *[self._candidate_for(fixture, semaphore) for fixture in fixtures]
        )
        candidates = [leg for leg in picks if leg is not None]
        logger.info(f"{len(candidates)} of {len(fixtures)} fixtures produced a parley candidate")

        parley = self.parley_service.build_parley(candidates, now)
        if parley is None:
            logger.warning(
                f"Not enough high-confidence picks for the parley of the day: {len(candidates)}"
            )
            return None

        dto = self._to_dto(parley)
        if self.cache is not None:
            self.cache.set(cache_key, dto.model_dump(mode="json"), CacheService.TTL_PARLEY)
        return dto
