"""
Predict Match Use Case

Orchestrates one forecast: season resolution, the Poisson model, the
head-to-head and market blends, and the final formatting into a
PredictionResultDTO.
"""

import logging
from typing import Optional

from matchcast.application.dtos.dtos import (
    ComparisonDTO,
    GoalsDTO,
    MarketOddsDTO,
    OutcomePercentDTO,
    PredictionResultDTO,
    PredictionsDTO,
    WinnerDTO,
)
from matchcast.domain.entities.entities import MatchForecast
from matchcast.domain.exceptions import UpstreamFetchError
from matchcast.domain.repositories.repositories import StatisticsProvider
from matchcast.domain.services.narrative_service import REMARK_THRESHOLD, NarrativeService
from matchcast.domain.services.prediction_service import PredictionService
from matchcast.domain.services.season_resolver import SeasonResolver
from matchcast.domain.services.signal_blender import SignalBlender
from matchcast.domain.services.statistics_service import StatisticsService
from matchcast.utils.math_utils import format_fixed, format_percent, percent_value


logger = logging.getLogger(__name__)


class PredictMatchUseCase:
    """Use case for predicting a single fixture."""

    def __init__(
        self,
        provider: StatisticsProvider,
        season_resolver: Optional[SeasonResolver] = None,
        prediction_service: Optional[PredictionService] = None,
        signal_blender: Optional[SignalBlender] = None,
        narrative_service: Optional[NarrativeService] = None,
    ):
        self.provider = provider
        self.season_resolver = season_resolver or SeasonResolver(provider)
        self.prediction_service = prediction_service or PredictionService()
        self.signal_blender = signal_blender or SignalBlender()
        self.narrative_service = narrative_service or NarrativeService()

    async def _fetch_head_to_head(self, home_team_id: int, away_team_id: int) -> list[dict]:
        try:
            return await self.provider.get_head_to_head(home_team_id, away_team_id)
        except UpstreamFetchError as e:
            logger.warning(f"Head-to-head unavailable for {home_team_id}-{away_team_id}: {e}")
            return []

    async def forecast(
        self,
        home_team_id: int,
        away_team_id: int,
        league_id: int,
        season: int,
        fixture_id: Optional[int] = None,
    ) -> MatchForecast:
        """
        Run the model for a fixture and return the unformatted result.

        Raises:
            NoUsableStatisticsError: No season between the target and the
                floor had statistics for both teams
        """
        resolved = await self.season_resolver.resolve(
            home_team_id, away_team_id, league_id, season
        )

        initial_expectancy = self.prediction_service.calculate_goal_expectancy(
            resolved.home_stats, resolved.away_stats, resolved.standings
        )
        initial_distribution = self.prediction_service.build_score_distribution(initial_expectancy)

        # Stage A: head-to-head
        h2h_fixtures = await self._fetch_head_to_head(home_team_id, away_team_id)
        record = StatisticsService.calculate_head_to_head(
            h2h_fixtures, home_team_id, away_team_id
        )
        after_h2h = self.signal_blender.blend_head_to_head(
            initial_distribution.outcomes, initial_expectancy, record
        )

        # Stage B: market odds, only for a known fixture
        odds = None
        if fixture_id:
            odds = await self.provider.get_odds(fixture_id)
            if odds is None:
                logger.info(f"No odds for fixture {fixture_id}, skipping market blend")
        after_market = self.signal_blender.blend_market_odds(
            after_h2h.outcomes, after_h2h.expectancy, odds
        )

        signals = []
        if after_h2h.applied:
            signals.append(f"head-to-head history ({record.total_games} games)")
        if after_market.applied:
            signals.append("bookmaker odds")

        # Score-derived metrics must come from the final expectancy
        distribution = self.prediction_service.build_score_distribution(after_market.expectancy)

        logger.info(
            f"Forecast {resolved.home_stats.team_name} vs {resolved.away_stats.team_name} "
            f"(season {resolved.season}): xG {after_market.expectancy.home:.2f}-"
            f"{after_market.expectancy.away:.2f}, signals: {', '.join(signals) or 'none'}"
        )

        return MatchForecast(
            resolved=resolved,
            initial_expectancy=initial_expectancy,
            initial_distribution=initial_distribution,
            expectancy=after_market.expectancy,
            outcomes=after_market.outcomes,
            distribution=distribution,
            head_to_head=record,
            market_odds=odds,
            signals=tuple(signals),
        )

    def to_dto(self, forecast: MatchForecast) -> PredictionResultDTO:
        """Format a forecast into the public prediction record."""
        home_name = forecast.home_stats.team_name
        away_name = forecast.away_stats.team_name
        outcomes = forecast.outcomes
        distribution = forecast.distribution
        home_goals, away_goals = distribution.most_probable_score

        predictions = PredictionsDTO(
            winner=WinnerDTO(
                name=self.narrative_service.winner_label(outcomes, home_name, away_name)
            ),
            mostProbableScore=f"{home_goals} - {away_goals}",
            btts=distribution.both_teams_score > REMARK_THRESHOLD,
            under_over="+2.5" if distribution.over_threshold > REMARK_THRESHOLD else "-2.5",
            goals=GoalsDTO(
                home=format_fixed(forecast.expectancy.home),
                away=format_fixed(forecast.expectancy.away),
            ),
            percent=OutcomePercentDTO(
                home=format_percent(outcomes.home_win),
                draw=format_percent(outcomes.draw),
                away=format_percent(outcomes.away_win),
            ),
            btts_probability=percent_value(distribution.both_teams_score),
            over_2_5_probability=percent_value(distribution.over_threshold),
            under_2_5_probability=percent_value(distribution.under_threshold),
            advice=self.narrative_service.compose_advice(
                outcomes,
                distribution,
                home_name,
                away_name,
                forecast.resolved.season,
                list(forecast.signals),
            ),
            statistics_season=forecast.resolved.season,
        )

        comparison = self.narrative_service.build_comparison(
            forecast.home_stats,
            forecast.away_stats,
            forecast.expectancy,
            forecast.initial_distribution.outcomes,
            outcomes,
            forecast.head_to_head,
        )

        market_odds = None
        if forecast.market_odds is not None:
            market_odds = MarketOddsDTO.model_validate(forecast.market_odds)

        return PredictionResultDTO(
            predictions=predictions,
            comparison=ComparisonDTO.model_validate(comparison),
            market_odds=market_odds,
        )

    async def execute(
        self,
        home_team_id: int,
        away_team_id: int,
        league_id: int,
        season: int,
        fixture_id: Optional[int] = None,
    ) -> PredictionResultDTO:
        """
        Predict a fixture.

        Args:
            home_team_id: Home team id
            away_team_id: Away team id
            league_id: League id
            season: Target season; older seasons are tried when it has no data
            fixture_id: Enables the market-odds blend when given

        Returns:
            PredictionResultDTO
        """
        forecast = await self.forecast(home_team_id, away_team_id, league_id, season, fixture_id)
        return self.to_dto(forecast)
