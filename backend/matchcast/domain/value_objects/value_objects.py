"""
Domain Value Objects Module

Value objects are immutable objects that are defined by their attributes rather than identity.
They encapsulate validation logic and provide type safety.
"""

from dataclasses import dataclass

from matchcast.utils.math_utils import normalize_probabilities


@dataclass(frozen=True)
class MarketOdds:
    """
    Represents bookmaker odds for a fixture.

    Stores decimal odds for home win, draw, and away win taken from a
    single bookmaker's 1X2 market.
    """
    home: float
    draw: float
    away: float

    def __post_init__(self):
        if self.home < 1.0 or self.draw < 1.0 or self.away < 1.0:
            raise ValueError("Odds must be >= 1.0")

    def to_probabilities(self) -> tuple[float, float, float]:
        """
        Convert odds to implied probabilities.

        Returns:
            Tuple of (home_prob, draw_prob, away_prob) normalized to sum to 1,
            which removes the bookmaker margin.
        """
        return normalize_probabilities(1 / self.home, 1 / self.draw, 1 / self.away)

    def as_dict(self) -> dict[str, float]:
        return {"home": self.home, "draw": self.draw, "away": self.away}


@dataclass(frozen=True)
class TeamStrength:
    """
    Represents a team's attacking and defensive strength.

    Values are relative to the league average goals per match.
    """
    attack_strength: float
    defense_strength: float

    def __post_init__(self):
        if self.attack_strength < 0 or self.defense_strength < 0:
            raise ValueError("Strength values cannot be negative")


@dataclass(frozen=True)
class GoalExpectancy:
    """Expected goals (Poisson lambdas) for each side of a fixture."""
    home: float
    away: float

    def __post_init__(self):
        if self.home <= 0 or self.away <= 0:
            raise ValueError("Expected goals must be positive")

    @property
    def total(self) -> float:
        return self.home + self.away


@dataclass(frozen=True)
class OutcomeProbabilities:
    """
    Three-way match outcome split (home win, draw, away win).

    Always built through ``of`` so the values sum to 1.
    """
    home_win: float
    draw: float
    away_win: float

    @classmethod
    def of(cls, home_win: float, draw: float, away_win: float) -> "OutcomeProbabilities":
        """Create a normalized split, falling back to the default split on zero mass."""
        return cls(*normalize_probabilities(home_win, draw, away_win))

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.home_win, self.draw, self.away_win)

    @property
    def home_share(self) -> float:
        """Home win plus half the draw."""
        return self.home_win + self.draw / 2

    @property
    def away_share(self) -> float:
        """Away win plus half the draw."""
        return self.away_win + self.draw / 2
