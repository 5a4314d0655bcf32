"""
Domain exceptions for the prediction system.
"""


class PredictionException(Exception):
    """Base exception for prediction-related errors."""
    pass


class UpstreamFetchError(PredictionException):
    """Raised when a single request to the statistics provider fails or returns no usable payload."""
    pass


class NoUsableStatisticsError(PredictionException):
    """Raised when no candidate season has enough statistics to build a prediction."""

    def __init__(self, attempted_seasons: list[int]):
        self.attempted_seasons = list(attempted_seasons)
        attempted = ", ".join(str(s) for s in self.attempted_seasons) or "none"
        super().__init__(
            f"No usable statistics for either team in the attempted seasons ({attempted})."
        )
