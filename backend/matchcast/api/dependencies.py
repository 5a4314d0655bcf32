"""
API Dependencies Module

Provides dependency injection for FastAPI routes.
Contains factory functions for creating use case dependencies.
"""

import os
from functools import lru_cache

from matchcast.infrastructure.data_sources.api_football import APIFootballSource
from matchcast.infrastructure.cache.cache_service import get_cache_service
from matchcast.domain.services.parley_service import ParleyService
from matchcast.domain.services.prediction_service import PredictionService
from matchcast.domain.services.season_resolver import DEFAULT_FLOOR_SEASON, SeasonResolver
from matchcast.domain.services.signal_blender import SignalBlender
from matchcast.application.use_cases.predict_match_use_case import PredictMatchUseCase
from matchcast.application.use_cases.get_parley_use_case import GetParleyUseCase


@lru_cache()
def get_api_football() -> APIFootballSource:
    """Get API-Football data source (cached)."""
    return APIFootballSource(cache=get_cache_service())


@lru_cache()
def get_prediction_service() -> PredictionService:
    """Get prediction service (cached)."""
    return PredictionService()


@lru_cache()
def get_signal_blender() -> SignalBlender:
    """Get signal blender (cached)."""
    return SignalBlender()


@lru_cache()
def get_season_resolver() -> SeasonResolver:
    """Get season resolver bound to API-Football (cached)."""
    floor_season = int(os.getenv("STATS_FLOOR_SEASON", str(DEFAULT_FLOOR_SEASON)))
    return SeasonResolver(get_api_football(), floor_season=floor_season)


def get_predict_match_use_case() -> PredictMatchUseCase:
    """Get the predict-match use case."""
    return PredictMatchUseCase(
        provider=get_api_football(),
        season_resolver=get_season_resolver(),
        prediction_service=get_prediction_service(),
        signal_blender=get_signal_blender(),
    )


@lru_cache()
def get_parley_service() -> ParleyService:
    """Get parley service (cached)."""
    return ParleyService()


def get_parley_use_case() -> GetParleyUseCase:
    """Get the parley-of-the-day use case."""
    return GetParleyUseCase(
        fixture_provider=get_api_football(),
        predict_match_use_case=get_predict_match_use_case(),
        parley_service=get_parley_service(),
        cache=get_cache_service(),
    )
