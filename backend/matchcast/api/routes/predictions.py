"""
Predictions Router

API endpoints for match predictions and the fixtures they are made for.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from matchcast.application.dtos.dtos import (
    ErrorResponseDTO,
    PredictMatchRequestDTO,
    PredictionResultDTO,
)
from matchcast.application.use_cases.predict_match_use_case import PredictMatchUseCase
from matchcast.api.dependencies import get_api_football, get_predict_match_use_case
from matchcast.domain.exceptions import NoUsableStatisticsError, UpstreamFetchError
from matchcast.infrastructure.data_sources.api_football import APIFootballSource


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Predictions"])


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponseDTO(error=error, details=details).model_dump(exclude_none=True),
    )


@router.post(
    "/predict-match",
    response_model=PredictionResultDTO,
    responses={
        400: {"model": ErrorResponseDTO, "description": "Missing parameters"},
        422: {"model": ErrorResponseDTO, "description": "No usable statistics"},
        500: {"model": ErrorResponseDTO, "description": "Internal server error"},
    },
    summary="Predict a match",
    description="Poisson forecast for a fixture, blended with head-to-head history and, when a fixtureId is given, bookmaker odds.",
)
async def predict_match(
    request: PredictMatchRequestDTO,
    use_case: PredictMatchUseCase = Depends(get_predict_match_use_case),
):
    """Predict a single match."""
    missing = request.missing_fields()
    if missing:
        return _error(400, f"Missing required parameters: {', '.join(missing)}.")

    try:
        return await use_case.execute(
            request.home_team_id,
            request.away_team_id,
            request.league_id,
            request.season,
            request.fixture_id,
        )
    except NoUsableStatisticsError as e:
        logger.warning(f"Prediction unavailable: {e}")
        return _error(422, "Could not generate the prediction.", str(e))
    except Exception as e:
        logger.error(f"Error predicting match: {e}", exc_info=True)
        return _error(500, "Error generating the prediction.", str(e))


@router.get(
    "/all-fixtures",
    responses={500: {"model": ErrorResponseDTO, "description": "Upstream error"}},
    summary="Upcoming fixtures",
    description="Raw API-Football fixtures payload for the next fixtures of a league.",
)
async def all_fixtures(
    league: int = Query(default=39, description="API-Football league id"),
    season: int = Query(default=2025, description="Season year"),
    next_n: int = Query(default=10, ge=1, le=50, alias="next", description="Fixtures to return"),
    source: APIFootballSource = Depends(get_api_football),
):
    """List upcoming fixtures of a league."""
    try:
        data = await source.get_fixtures_payload(league, season, next_n)
    except UpstreamFetchError as e:
        logger.error(f"Error fetching fixtures for league {league}: {e}")
        return _error(500, "Error fetching fixtures.", str(e))

    if not data.get("response"):
        return {
            "response": [],
            "message": f"No upcoming fixtures for league {league}, season {season}.",
        }
    return data
