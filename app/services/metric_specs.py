"""
Per-metric configuration for the metrics pipeline.

Each MetricSpec names the source field, display unit and label, the
conversion applied to every raw value, the queries a summary needs, and the
derived-field steps run after merging.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from app.core import units
from app.models import MetricId, PressureTrend
from app.services.timeseries_query_service import AggregateFunction

Converter = Callable[[float], float]

PRESSURE_TREND_THRESHOLD = 0.02  # inHg across the last three buckets


@dataclass(frozen=True)
class CurrentReading:
    """The "most recent value" query of a metric."""

    field: Optional[str] = None  # defaults to the metric's source field
    range: timedelta = timedelta(hours=1)
    min_value: Optional[float] = None
    convert: Optional[Converter] = None  # defaults to the metric's converter


@dataclass(frozen=True)
class ExtraQuery:
    """A whole-range aggregate reported next to the main series, e.g. peak gust."""

    name: str
    field: str
    fn: AggregateFunction
    convert: Converter


@dataclass(frozen=True)
class DerivationInput:
    values: Sequence[float]  # converted series values, oldest first
    raw_values: Sequence[float]  # unconverted values of the same buckets
    current: Optional[float]
    extras: Mapping[str, Optional[float]] = field(default_factory=dict)


Deriver = Callable[[DerivationInput], Dict[str, Any]]


@dataclass(frozen=True)
class MetricSpec:
    id: MetricId
    source_field: str
    unit: str
    label: str
    convert: Converter
    aggregate: AggregateFunction = AggregateFunction.MEAN
    current: Optional[CurrentReading] = CurrentReading()
    extra_queries: Tuple[ExtraQuery, ...] = ()
    derivers: Tuple[Deriver, ...] = ()
    # When False the current reading is reported even if the series is empty
    current_requires_series: bool = True
    chartable: bool = True

    @property
    def error_name(self) -> str:
        """Name used in "Failed to fetch <name> data" messages."""
        return self.id.value.replace("_", " ")


def classify_pressure_trend(values: Sequence[float]) -> PressureTrend:
    """Compare the first and last of the final three readings."""
    if len(values) < 3:
        return PressureTrend.STEADY
    recent = list(values)[-3:]
    delta = recent[-1] - recent[0]
    if delta > PRESSURE_TREND_THRESHOLD:
        return PressureTrend.RISING
    if delta < -PRESSURE_TREND_THRESHOLD:
        return PressureTrend.FALLING
    return PressureTrend.STEADY


def pressure_trend(data: DerivationInput) -> Dict[str, Any]:
    return {"trend": classify_pressure_trend(data.values).value}


def precipitation_total(data: DerivationInput) -> Dict[str, Any]:
    return {"total": units.round_half_up(sum(data.values), 2)}


def lightning_strikes(data: DerivationInput) -> Dict[str, Any]:
    return {
        "total_strikes": sum(data.raw_values),
        "last_strike_distance": data.current,
    }


def wind_gust(data: DerivationInput) -> Dict[str, Any]:
    gust = data.extras.get("gust")
    return {"gust": gust if gust is not None else 0}


_SPECS: List[MetricSpec] = [
    MetricSpec(
        id=MetricId.TEMPERATURE,
        source_field="temp",
        unit="°F",
        label="Temperature",
        convert=units.celsius_to_fahrenheit,
    ),
    MetricSpec(
        id=MetricId.HUMIDITY,
        source_field="humidity",
        unit="%",
        label="Humidity",
        convert=units.whole_number,
    ),
    MetricSpec(
        id=MetricId.PRESSURE,
        source_field="p",
        unit="inHg",
        label="Pressure",
        convert=units.hpa_to_inhg,
        derivers=(pressure_trend,),
    ),
    MetricSpec(
        id=MetricId.WIND,
        source_field="wind_avg",
        unit="mph",
        label="Wind Speed",
        convert=units.ms_to_mph,
        extra_queries=(
            ExtraQuery(name="gust", field="wind_gust", fn=AggregateFunction.MAX, convert=units.ms_to_mph),
        ),
        derivers=(wind_gust,),
    ),
    MetricSpec(
        id=MetricId.DEW_POINT,
        source_field="dew_point",
        unit="°F",
        label="Dew Point",
        convert=units.celsius_to_fahrenheit,
    ),
    MetricSpec(
        id=MetricId.ILLUMINANCE,
        source_field="illuminance",
        unit="lux",
        label="Illuminance",
        convert=units.whole_number,
    ),
    MetricSpec(
        id=MetricId.SOLAR_RADIATION,
        source_field="solar_radiation",
        unit="W/m²",
        label="Solar Radiation",
        convert=units.whole_number,
    ),
    MetricSpec(
        id=MetricId.PRECIPITATION,
        source_field="precipitation",
        unit="in",
        label="Precipitation",
        convert=units.mm_to_inches,
        aggregate=AggregateFunction.SUM,
        derivers=(precipitation_total,),
        current_requires_series=False,
        chartable=False,
    ),
    MetricSpec(
        id=MetricId.LIGHTNING,
        source_field="strike_count",
        unit="strikes",
        label="Lightning",
        convert=units.identity,
        aggregate=AggregateFunction.SUM,
        current=CurrentReading(
            field="strike_distance",
            range=timedelta(hours=24),
            min_value=0,
            convert=units.km_to_miles,
        ),
        derivers=(lightning_strikes,),
        current_requires_series=False,
        chartable=False,
    ),
]

METRIC_SPECS: Dict[MetricId, MetricSpec] = {spec.id: spec for spec in _SPECS}

if len(METRIC_SPECS) != len(_SPECS):
    raise RuntimeError("Duplicate metric id in METRIC_SPECS")


def get_metric_spec(metric: MetricId) -> MetricSpec:
    return METRIC_SPECS[MetricId(metric)]
