"""
InfluxDB query service for station time-series.

Renders declarative range/filter/aggregation queries to Flux and streams the
resulting rows back as ``Observation`` values.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import AsyncIterator, List, Optional

from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync

from app.core.config import settings
from app.core.exceptions import QueryFailure
from app.core.logging import get_logger

logger = get_logger(__name__)


class AggregateFunction(str, Enum):
    MEAN = "mean"
    MAX = "max"
    MIN = "min"
    SUM = "sum"
    LAST = "last"


@dataclass(frozen=True)
class Observation:
    """One timestamped numeric row of a single series."""

    timestamp: datetime
    value: float


@dataclass(frozen=True)
class AggregateQuery:
    """
    Declarative time-series query.

    With ``window`` set, rows are reduced per window (``aggregateWindow``);
    without it the whole range collapses to one row. ``LAST`` always
    returns the single most recent row in range.
    """

    bucket: str
    measurement: str
    station: str
    field: str
    range: timedelta
    fn: AggregateFunction = AggregateFunction.MEAN
    window: Optional[timedelta] = None
    min_value: Optional[float] = None


def to_flux_duration(duration: timedelta) -> str:
    """Render a timedelta as the largest whole Flux unit (1d, 2h, 15m, 30s)."""
    seconds = int(duration.total_seconds())
    if seconds <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds % size == 0:
            return f"{seconds // size}{unit}"
    return f"{seconds}s"


def _flux_string(value: str) -> str:
    """Quote a Flux string literal; ``${`` would otherwise start interpolation."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{escaped}"'


def build_flux_query(query: AggregateQuery) -> str:
    """Render an AggregateQuery as Flux."""
    lines = [
        f"from(bucket: {_flux_string(query.bucket)})",
        f"  |> range(start: -{to_flux_duration(query.range)})",
        f'  |> filter(fn: (r) => r["_measurement"] == {_flux_string(query.measurement)})',
        f'  |> filter(fn: (r) => r["station"] == {_flux_string(query.station)})',
        f'  |> filter(fn: (r) => r["_field"] == {_flux_string(query.field)})',
    ]
    if query.min_value is not None:
        lines.append(f'  |> filter(fn: (r) => r["_value"] > {query.min_value!r})')

    if query.fn is AggregateFunction.LAST or query.window is None:
        lines.append(f"  |> {query.fn.value}()")
    else:
        lines.append(
            f"  |> aggregateWindow(every: {to_flux_duration(query.window)}, "
            f"fn: {query.fn.value}, createEmpty: false)"
        )
    lines.append(f'  |> yield(name: "{query.fn.value}")')
    return "\n".join(lines)


class TimeSeriesQueryService:
    """Service for querying the station bucket in InfluxDB."""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        org: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ):
        """Initialize connection settings; the client itself is created on first use."""
        self.url = url or settings.influxdb_url
        self.token = token if token is not None else settings.influxdb_token
        self.org = org if org is not None else settings.influxdb_org
        self.timeout_ms = timeout_ms or settings.influxdb_timeout_ms
        self._client: Optional[InfluxDBClientAsync] = None

    def _get_client(self) -> InfluxDBClientAsync:
        # The async client binds to the running event loop, so create it lazily
        if self._client is None:
            self._client = InfluxDBClientAsync(
                url=self.url,
                token=self.token,
                org=self.org,
                timeout=self.timeout_ms,
            )
            logger.info(f"InfluxDB client initialized for {self.url}")
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def stream(self, query: AggregateQuery) -> AsyncIterator[Observation]:
        """
        Stream observations for one query.

        Each call issues a fresh query, so the producer can be restarted by
        calling again. Rows without a numeric value are skipped.

        Raises:
            QueryFailure: if the store rejects the query or the transport fails
        """
        flux = build_flux_query(query)
        logger.debug(f"Running Flux query:\n{flux}")
        try:
            records = await self._get_client().query_api().query_stream(flux)
            async for record in records:
                value = record.get_value()
                if value is None or isinstance(value, bool):
                    continue
                yield Observation(timestamp=record.get_time(), value=float(value))
        except Exception as e:
            logger.error(f"InfluxDB query for '{query.field}' ({query.fn.value}) failed: {e}")
            raise QueryFailure(query, str(e)) from e

    async def fetch(self, query: AggregateQuery) -> List[Observation]:
        """Drain ``stream`` into a list."""
        return [observation async for observation in self.stream(query)]


# Singleton instance
_timeseries_query_service: Optional[TimeSeriesQueryService] = None


def get_timeseries_query_service() -> TimeSeriesQueryService:
    """Get time-series query service instance."""
    global _timeseries_query_service
    if _timeseries_query_service is None:
        _timeseries_query_service = TimeSeriesQueryService()
    return _timeseries_query_service
