"""
Metrics pipeline: turns station time-series into display-ready statistics.

For one metric request the pipeline fans out its queries concurrently, waits
for all of them (or the first failure), then merges, converts and derives
synchronously. Separate metric requests share nothing and fail independently.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from app.core.config import Settings, settings
from app.core.exceptions import DataUnavailable, QueryFailure, UnsupportedMetric, WeatherServiceError
from app.core.geo import degrees_to_cardinal
from app.core.logging import get_logger
from app.core.time_buckets import format_clock_label, format_time_key, select_aggregation_window
from app.models import ChartData, DashboardEntry, MetricId, StatSummary, WindDirection
from app.services.metric_specs import METRIC_SPECS, DerivationInput, MetricSpec
from app.services.series_merger import merge_series, reduce_to_keyed
from app.services.timeseries_query_service import (
    AggregateFunction,
    AggregateQuery,
    Observation,
    TimeSeriesQueryService,
    get_timeseries_query_service,
    to_flux_duration,
)

logger = get_logger(__name__)

SUMMARY_RANGE = timedelta(hours=24)
SUMMARY_WINDOW = timedelta(hours=1)
WIND_DIRECTION_FIELD = "wind_direction"
WIND_DIRECTION_RANGE = timedelta(hours=1)
DEFAULT_CHART_DAYS = 7


@dataclass(frozen=True)
class StationQueryConfig:
    """Which station's series the pipeline reads, and how labels are rendered."""

    bucket: str
    measurement: str
    station: str
    display_timezone: str = "UTC"

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "StationQueryConfig":
        return cls(
            bucket=source.influxdb_bucket,
            measurement=source.influxdb_measurement,
            station=source.station_id,
            display_timezone=source.display_timezone,
        )

    @property
    def tz(self) -> tzinfo:
        if self.display_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.display_timezone)


class MetricsPipeline:
    """Builds StatSummary, ChartData and WindDirection values for one station."""

    def __init__(
        self,
        query_service: TimeSeriesQueryService,
        config: StationQueryConfig,
        specs: Optional[Dict[MetricId, MetricSpec]] = None,
    ):
        self.query_service = query_service
        self.config = config
        self.specs = specs if specs is not None else METRIC_SPECS
        self._tz = config.tz

    def _query(
        self,
        field: str,
        range: timedelta,
        fn: AggregateFunction,
        window: Optional[timedelta] = None,
        min_value: Optional[float] = None,
    ) -> AggregateQuery:
        return AggregateQuery(
            bucket=self.config.bucket,
            measurement=self.config.measurement,
            station=self.config.station,
            field=field,
            range=range,
            fn=fn,
            window=window,
            min_value=min_value,
        )

    def _spec(self, metric: MetricId) -> MetricSpec:
        try:
            return self.specs[MetricId(metric)]
        except (KeyError, ValueError):
            raise UnsupportedMetric(str(metric)) from None

    async def _fetch_all(self, name: str, queries: Sequence[AggregateQuery]) -> List[List[Observation]]:
        """
        Run queries concurrently; any failure fails the whole request.

        On the first failure the sibling queries are cancelled and awaited,
        so no query outlives the request that issued it.
        """
        tasks = [asyncio.ensure_future(self.query_service.fetch(q)) for q in queries]
        try:
            return list(await asyncio.gather(*tasks))
        except QueryFailure as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error(f"Error querying {name} data: {e.reason}")
            raise DataUnavailable(name, e) from e

    async def get_metric_summary(self, metric: MetricId) -> StatSummary:
        """
        Get the 24-hour summary card for a metric.

        Returns:
            StatSummary with hourly series, current reading, high/low and the
            metric's derived fields

        Raises:
            DataUnavailable: if any underlying query fails
        """
        spec = self._spec(metric)

        queries = [self._query(spec.source_field, SUMMARY_RANGE, spec.aggregate, SUMMARY_WINDOW)]
        if spec.current is not None:
            queries.append(
                self._query(
                    spec.current.field or spec.source_field,
                    spec.current.range,
                    AggregateFunction.LAST,
                    min_value=spec.current.min_value,
                )
            )
        for extra in spec.extra_queries:
            queries.append(self._query(extra.field, SUMMARY_RANGE, extra.fn))

        results = await self._fetch_all(spec.error_name, queries)
        primary = results[0]
        position = 1

        current: Optional[float] = None
        last_updated: Optional[datetime] = None
        if spec.current is not None:
            latest = results[position]
            position += 1
            if latest:
                convert = spec.current.convert or spec.convert
                current = convert(latest[-1].value)
                last_updated = latest[-1].timestamp

        extras: Dict[str, Optional[float]] = {}
        for extra in spec.extra_queries:
            rows = results[position]
            position += 1
            extras[extra.name] = extra.convert(rows[-1].value) if rows else None

        converted = {}
        labels = {}
        for observation in primary:
            key = format_time_key(observation.timestamp, include_time=True)
            converted[key] = spec.convert(observation.value)
            labels[key] = format_clock_label(observation.timestamp, self._tz)
        series = merge_series(mean=converted, labels=labels)

        if spec.current is None and series:
            # No dedicated reading; the newest bucket stands in for it
            current = series[-1].avg
            last_updated = max(observation.timestamp for observation in primary)

        if not series and spec.current_requires_series:
            logger.info(f"No {spec.error_name} observations in the last 24h")
            return StatSummary(
                metric=spec.id,
                label=spec.label,
                unit=spec.unit,
                extra=self._derive(spec, DerivationInput(values=[], raw_values=[], current=None)),
            )

        values = [point.avg for point in series]
        derivation = DerivationInput(
            values=values,
            raw_values=[observation.value for observation in primary],
            current=current,
            extras=extras,
        )
        return StatSummary(
            metric=spec.id,
            label=spec.label,
            unit=spec.unit,
            current=current,
            last_updated=last_updated,
            high=max((point.high for point in series), default=0),
            low=min((point.low for point in series), default=0),
            series=series,
            extra=self._derive(spec, derivation),
        )

    @staticmethod
    def _derive(spec: MetricSpec, data: DerivationInput) -> Dict[str, Any]:
        extra: Dict[str, Any] = {}
        for deriver in spec.derivers:
            extra.update(deriver(data))
        return extra

    async def get_chart_data(self, metric: MetricId, days: int = DEFAULT_CHART_DAYS) -> ChartData:
        """
        Get mean/max/min history for a metric over the last ``days`` days.

        Raises:
            InvalidRange: if ``days`` is less than 1 (raised before any query)
            UnsupportedMetric: if the metric has no chart history
            DataUnavailable: if any of the three queries fails
        """
        spec = self._spec(metric)
        if not spec.chartable:
            raise UnsupportedMetric(spec.id.value)
        window = select_aggregation_window(days)
        history = timedelta(days=days)

        mean_rows, max_rows, min_rows = await self._fetch_all(
            f"{spec.error_name} chart",
            [
                self._query(spec.source_field, history, fn, window.every)
                for fn in (AggregateFunction.MEAN, AggregateFunction.MAX, AggregateFunction.MIN)
            ],
        )

        def keyed(rows: Iterable[Observation]) -> Dict[str, float]:
            return {
                key: spec.convert(value)
                for key, value in reduce_to_keyed(rows, window.include_time).items()
            }

        data = merge_series(mean=keyed(mean_rows), maximum=keyed(max_rows), minimum=keyed(min_rows))
        logger.debug(f"Chart for {spec.id.value} over {days}d has {len(data)} points")
        return ChartData(
            metric=spec.id,
            days=days,
            window=to_flux_duration(window.every),
            label=spec.label,
            unit=spec.unit,
            data=data,
        )

    async def get_wind_direction(self) -> WindDirection:
        """Latest wind direction within the last hour; 0° (north) when there is none."""
        (rows,) = await self._fetch_all(
            "wind direction",
            [self._query(WIND_DIRECTION_FIELD, WIND_DIRECTION_RANGE, AggregateFunction.LAST)],
        )
        degrees = rows[-1].value if rows else 0
        cardinal = degrees_to_cardinal(degrees)
        return WindDirection(degrees=degrees, cardinal=cardinal.short, cardinal_full=cardinal.full)

    async def get_dashboard(self, metrics: Optional[Iterable[MetricId]] = None) -> Dict[str, DashboardEntry]:
        """
        Fetch every dashboard card in parallel.

        Each card succeeds or fails on its own; a failed card carries its
        error message instead of data.
        """
        selected = list(metrics) if metrics is not None else list(self.specs)
        names: List[str] = [MetricId(m).value for m in selected] + ["wind_direction"]
        calls: List[Awaitable[Any]] = [self.get_metric_summary(m) for m in selected]
        calls.append(self.get_wind_direction())

        results = await asyncio.gather(*calls, return_exceptions=True)

        dashboard: Dict[str, DashboardEntry] = {}
        for name, result in zip(names, results):
            if isinstance(result, WeatherServiceError):
                dashboard[name] = DashboardEntry(error=str(result))
            elif isinstance(result, Exception):
                logger.error(f"Unexpected error building {name} card: {result}")
                dashboard[name] = DashboardEntry(error=f"Failed to fetch {name.replace('_', ' ')} data")
            elif isinstance(result, BaseException):
                raise result
            else:
                dashboard[name] = DashboardEntry(data=result)
        return dashboard


# Singleton instance
_metrics_pipeline: Optional[MetricsPipeline] = None


def get_metrics_pipeline() -> MetricsPipeline:
    """Get metrics pipeline instance bound to the configured station."""
    global _metrics_pipeline
    if _metrics_pipeline is None:
        _metrics_pipeline = MetricsPipeline(
            get_timeseries_query_service(),
            StationQueryConfig.from_settings(),
        )
    return _metrics_pipeline
