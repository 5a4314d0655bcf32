"""
Numeric guards shared by the prediction model.

Degenerate arithmetic never raises here: zero divisors, non-finite lambdas and
empty probability mass are replaced by fixed substitutes.
"""

import math
from decimal import Decimal, ROUND_HALF_UP

LAMBDA_FLOOR = 0.1
DEFAULT_HOME_LAMBDA = 1.5
DEFAULT_AWAY_LAMBDA = 1.0

# (home, draw, away); draw takes the residual
DEFAULT_OUTCOME_SPLIT = (0.33, 0.34, 0.33)


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, treating a zero divisor as 1 (neutral) instead of infinity."""
    if not denominator:
        denominator = 1
    return numerator / denominator


def safe_lambda(value: float, default: float) -> float:
    """Replace NaN/inf with ``default`` and floor the result at LAMBDA_FLOOR."""
    if value is None or math.isnan(value) or math.isinf(value):
        value = default
    return max(LAMBDA_FLOOR, value)


def normalize_probabilities(
    home: float,
    draw: float,
    away: float,
) -> tuple[float, float, float]:
    """
    Scale a three-way split so it sums to 1.

    Returns DEFAULT_OUTCOME_SPLIT when the total mass is not positive.
    """
    total = home + draw + away
    if not total > 0:
        return DEFAULT_OUTCOME_SPLIT
    return (home / total, draw / total, away / total)


def round_half_up(value: float, digits: int = 0) -> Decimal:
    """Round the exact binary value of ``value`` half away from zero."""
    exponent = Decimal(1).scaleb(-digits)
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_percent(probability: float, digits: int = 0) -> str:
    """Format a probability in [0, 1] as a percent string, e.g. ``"47%"``."""
    return f"{round_half_up(probability * 100, digits)}%"


def format_fixed(value: float, digits: int = 2) -> str:
    """Format a number with a fixed count of decimals, e.g. ``"1.57"``."""
    return str(round_half_up(value, digits))


def percent_value(probability: float, digits: int = 1) -> float:
    """Probability as a rounded numeric percent, e.g. ``58.3``."""
    return float(round_half_up(probability * 100, digits))
