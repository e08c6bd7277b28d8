"""Exceptions raised by the weather feed.

Hierarchy:

    WeatherFeedError
    ├── UpstreamError            - api.weather.gov unreachable or returned bad data
    └── PreconditionError        - a fetch cannot start
        ├── NoPositionError
        ├── NoStationsError
        └── NoForecastPeriodsError

Every error is scoped to a single fetch cycle; none of them is fatal.
"""
from typing import Optional


class WeatherFeedError(Exception):
    """Base class for all weather feed errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UpstreamError(WeatherFeedError):
    """The upstream API failed or returned a malformed response."""

    def __init__(self, message: str, url: Optional[str] = None):
        """
        Args:
            message: Error description
            url: Request URL, if known
        """
        self.url = url
        super().__init__(message)


class PreconditionError(WeatherFeedError):
    """Something required to run a fetch is missing."""


class NoPositionError(PreconditionError):
    def __init__(self, message: str = "no position"):
        super().__init__(message)


class NoStationsError(PreconditionError):
    def __init__(self, message: str = "no stations found"):
        super().__init__(message)


class NoForecastPeriodsError(PreconditionError):
    def __init__(self, message: str = "no forecast periods"):
        super().__init__(message)
