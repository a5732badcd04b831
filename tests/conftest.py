"""
Pytest configuration and shared fixtures.
"""

import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple, Union

from app.core.exceptions import QueryFailure
from app.services.metrics_pipeline import MetricsPipeline, StationQueryConfig
from app.services.timeseries_query_service import AggregateFunction, AggregateQuery, Observation


class StubQueryService:
    """
    In-memory stand-in for TimeSeriesQueryService.

    Responses are keyed by (field, fn). A response that is an Exception
    instance fails that query with QueryFailure. ``delays`` holds per-key
    seconds to wait before answering; ``completed`` records queries that ran
    to the end.
    """

    def __init__(self, responses: Dict[Tuple[str, AggregateFunction], Union[List[Observation], Exception]] = None):
        self.responses = responses or {}
        self.delays: Dict[Tuple[str, AggregateFunction], float] = {}
        self.queries: List[AggregateQuery] = []
        self.completed: List[AggregateQuery] = []

    async def stream(self, query: AggregateQuery):
        self.queries.append(query)
        key = (query.field, query.fn)
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        response = self.responses.get(key, [])
        if isinstance(response, Exception):
            raise QueryFailure(query, str(response))
        for observation in response:
            yield observation
        self.completed.append(query)

    async def fetch(self, query: AggregateQuery) -> List[Observation]:
        return [observation async for observation in self.stream(query)]


@pytest.fixture
def base_time():
    """Top of an hour in UTC."""
    return datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def hourly(base_time):
    """Build hourly observations starting at base_time."""
    def _build(*values):
        return [
            Observation(timestamp=base_time + timedelta(hours=i), value=value)
            for i, value in enumerate(values)
        ]
    return _build


@pytest.fixture
def station_config():
    """Station the pipeline reads from."""
    return StationQueryConfig(bucket="weather", measurement="weather", station="ST-TEST")


@pytest.fixture
def stub_query_service():
    return StubQueryService()


@pytest.fixture
def pipeline(stub_query_service, station_config):
    return MetricsPipeline(stub_query_service, station_config)


@pytest.fixture
def reference_point():
    """Fixed reference point used for station correlation."""
    return (47.470597, -121.825356)
