"""
Error taxonomy for the metrics pipeline and upstream providers.
"""

from typing import Any, Optional, Union


class WeatherServiceError(Exception):
    """Base class for errors surfaced to API callers."""


class QueryFailure(WeatherServiceError):
    """A time-series query errored or timed out."""

    def __init__(self, query: Any, reason: str):
        self.query = query
        self.reason = reason
        super().__init__(f"Time-series query failed: {reason}")


class DataUnavailable(WeatherServiceError):
    """A metric request failed as a whole; no partial statistics exist."""

    def __init__(self, metric: str, cause: Optional[BaseException] = None):
        self.metric = metric
        self.cause = cause
        super().__init__(f"Failed to fetch {metric} data")


class UpstreamHTTPFailure(WeatherServiceError):
    """A forecast or station provider returned a non-success response."""

    def __init__(self, source: str, status: Union[int, str]):
        self.source = source
        self.status = status
        super().__init__(f"Failed to fetch {source} data: {status}")


class InvalidRange(ValueError):
    """Requested history range cannot be mapped to an aggregation window."""

    def __init__(self, days: int):
        self.days = days
        super().__init__(f"Range must be at least 1 day, got {days}")


class UnsupportedMetric(ValueError):
    """Metric is unknown or does not support the requested operation."""

    def __init__(self, metric: str):
        self.metric = metric
        super().__init__(f"Unsupported metric: {metric}")
