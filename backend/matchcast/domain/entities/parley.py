from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from matchcast.utils.time_utils import get_current_time


class PickType(str, Enum):
    """Markets a parley leg can be built on."""
    WINNER = "winner"
    TOTAL_GOALS = "total_goals"
    BTTS = "btts"


@dataclass(frozen=True)
class ParleyLeg:
    """
    A single high-confidence selection inside a parley.

    ``simulated_odd`` is the fair decimal price implied by ``confidence``
    (1 / confidence), since bookmaker prices for the exact selection are not
    fetched.
    """
    match_id: int
    home_team: str
    away_team: str
    competition_name: str
    pick_type: PickType
    pick_description: str
    confidence: float
    starting_at: Optional[datetime] = None
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None

    def __post_init__(self):
        if not 0 < self.confidence <= 1:
            raise ValueError(f"Confidence must be in (0, 1], got {self.confidence}")

    @property
    def simulated_odd(self) -> float:
        return 1 / self.confidence


@dataclass
class Parley:
    """
    Represents a combination of bets (parley/accumulator).
    """
    legs: List[ParleyLeg]
    parley_id: str = ""
    created_at: datetime = field(default_factory=get_current_time)
    total_odd: float = 0.0
    total_confidence: float = 0.0

    def __post_init__(self):
        self._calculate_totals()

    def _calculate_totals(self):
        """Multiply the legs' odds and confidences."""
        if not self.legs:
            return

        confidence = 1.0
        odd = 1.0
        for leg in self.legs:
            confidence *= leg.confidence
            odd *= leg.simulated_odd

        self.total_confidence = confidence
        self.total_odd = odd
