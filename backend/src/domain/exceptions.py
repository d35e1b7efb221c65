"""
Domain exceptions for the prediction system.
"""

from typing import Optional

from src.domain.constants import RATE_LIMIT_RETRY_AFTER_SECONDS


class PredictionException(Exception):
    """Base exception for prediction-related errors."""
    pass

class PredictionConsistencyError(PredictionException):
    """Raised when BTTS or Over/Under disagree with the predicted scoreline."""
    pass


class DataSourceException(Exception):
    """Raised when an upstream data provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class ApiKeyNotConfiguredException(DataSourceException):
    """Raised when a provider requires an API key that is not set."""
    pass

class InvalidApiKeyException(DataSourceException):
    """Raised when the provider rejects the configured API key (401)."""
    pass

class RateLimitExceededException(DataSourceException):
    """
    Raised when the provider answers 429.

    This is a retryable, user-facing condition and must never be
    replaced by mock data.
    """

    def __init__(
        self,
        message: str = "API rate limit exceeded. Please wait 1 minute before trying again.",
        retry_after_seconds: int = RATE_LIMIT_RETRY_AFTER_SECONDS,
    ):
        super().__init__(message, status_code=429)
        self.retry_after_seconds = retry_after_seconds
