"""
Data Transfer Objects (DTOs) Module

DTOs are used to transfer data between layers and to/from the API.
They use Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from matchcast.utils.time_utils import get_current_time


# ============================================================
# Request DTOs
# ============================================================

class PredictMatchRequestDTO(BaseModel):
    """
    Request body for a single match prediction.

    Ids left out or sent as 0 are rejected by the route with a 400, so every
    field is optional at the schema level.
    """
    model_config = ConfigDict(populate_by_name=True)

    home_team_id: Optional[int] = Field(default=None, alias="homeTeamId")
    away_team_id: Optional[int] = Field(default=None, alias="awayTeamId")
    league_id: Optional[int] = Field(default=None, alias="leagueId")
    season: Optional[int] = None
    fixture_id: Optional[int] = Field(default=None, alias="fixtureId")

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or zero."""
        required = {
            "homeTeamId": self.home_team_id,
            "awayTeamId": self.away_team_id,
            "leagueId": self.league_id,
            "season": self.season,
        }
        return [name for name, value in required.items() if not value]


# ============================================================
# Prediction Response DTOs
# ============================================================

class SidePercentDTO(BaseModel):
    """Home/away percent strings, e.g. {"home": "56%", "away": "44%"}."""
    home: str
    away: str


class HeadToHeadPercentDTO(SidePercentDTO):
    draw: str
    totalGames: int


class ComparisonDTO(BaseModel):
    """Side-by-side comparison percentages."""
    model_config = ConfigDict(populate_by_name=True)

    form: SidePercentDTO
    att: SidePercentDTO
    def_: SidePercentDTO = Field(alias="def")
    poisson_distribution: SidePercentDTO
    h2h: HeadToHeadPercentDTO
    goals: SidePercentDTO
    total: SidePercentDTO


class WinnerDTO(BaseModel):
    name: str


class GoalsDTO(BaseModel):
    """Expected goals as 2-decimal strings."""
    home: str
    away: str


class OutcomePercentDTO(BaseModel):
    home: str
    draw: str
    away: str


class PredictionsDTO(BaseModel):
    """Betting-relevant outputs of the model."""
    winner: WinnerDTO
    mostProbableScore: str
    btts: bool
    under_over: str
    goals: GoalsDTO
    percent: OutcomePercentDTO
    btts_probability: float
    over_2_5_probability: float
    under_2_5_probability: float
    advice: str
    statistics_season: int


class MarketOddsDTO(BaseModel):
    """Raw decimal odds of the 1X2 market."""
    home: float
    draw: float
    away: float

    model_config = ConfigDict(from_attributes=True)


class PredictionResultDTO(BaseModel):
    """Full prediction record for one fixture."""
    predictions: PredictionsDTO
    comparison: ComparisonDTO
    market_odds: Optional[MarketOddsDTO] = None


# ============================================================
# Parley DTOs
# ============================================================

class ParleyLegDTO(BaseModel):
    """One selection of the parley of the day."""
    match_id: int
    home_team: str
    away_team: str
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None
    competition_name: str
    starting_at: Optional[datetime] = None
    pick_type: str
    pick_description: str
    confidence_percent: float
    simulated_individual_odd: float


class ParleyDTO(BaseModel):
    """Parley of the day."""
    parley_id: str
    title: str
    advice: str
    legs: list[ParleyLegDTO]
    total_simulated_odd: float
    total_confidence_percent: float


# ============================================================
# Service DTOs
# ============================================================

class HealthResponseDTO(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=get_current_time)


class ErrorResponseDTO(BaseModel):
    """Error response."""
    error: str
    details: Optional[str] = None
