"""
Pydantic models for pipeline outputs and API responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum


class MetricId(str, Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    WIND = "wind"
    DEW_POINT = "dew_point"
    ILLUMINANCE = "illuminance"
    SOLAR_RADIATION = "solar_radiation"
    PRECIPITATION = "precipitation"
    LIGHTNING = "lightning"


class PressureTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STEADY = "steady"


class SeriesPoint(BaseModel):
    """One merged time bucket"""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Sortable TimeKey (YYYY-MM-DDTHH:MM or YYYY-MM-DD)")
    high: float = Field(..., description="Bucket maximum, falling back to the mean")
    low: float = Field(..., description="Bucket minimum, falling back to the mean")
    avg: Optional[float] = Field(None, description="Bucket mean when a mean series exists")
    label: Optional[str] = Field(None, description="Display-only clock label (h:00 AM/PM)")


class StatSummary(BaseModel):
    """Display-ready statistics for one metric"""
    model_config = ConfigDict(frozen=True)

    metric: MetricId = Field(..., description="Metric identifier")
    label: str = Field(..., description="Human-readable metric name")
    unit: str = Field(..., description="Display unit")
    current: Optional[float] = Field(None, description="Most recent reading")
    last_updated: Optional[datetime] = Field(None, description="Timestamp of the most recent reading")
    high: float = Field(0, description="Maximum over the converted series")
    low: float = Field(0, description="Minimum over the converted series")
    series: List[SeriesPoint] = Field(default_factory=list, description="Ordered series points")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Metric-specific derived fields")


class ChartData(BaseModel):
    """Mean/max/min history for one metric"""
    model_config = ConfigDict(frozen=True)

    metric: MetricId = Field(..., description="Metric identifier")
    days: int = Field(..., description="Requested history range in days")
    window: str = Field(..., description="Aggregation window, e.g. 2h")
    label: str = Field(..., description="Human-readable metric name")
    unit: str = Field(..., description="Display unit")
    data: List[SeriesPoint] = Field(default_factory=list, description="Ordered chart points")


class WindDirection(BaseModel):
    """Latest wind direction reading"""
    model_config = ConfigDict(frozen=True)

    degrees: float = Field(..., description="Direction the wind blows from, in degrees")
    cardinal: str = Field(..., description="Compass abbreviation, e.g. WSW")
    cardinal_full: str = Field(..., description="Compass name, e.g. West-Southwest")


class DashboardEntry(BaseModel):
    """Result slot for one independently fetched dashboard card"""

    data: Optional[Any] = Field(None, description="StatSummary or WindDirection on success")
    error: Optional[str] = Field(None, description="Failure message when the fetch failed")


class NWSForecast(BaseModel):
    """Gridpoint forecast; periods are passed through as returned by NWS"""

    generated_at: Optional[str] = Field(None, description="properties.generatedAt")
    update_time: Optional[str] = Field(None, description="properties.updateTime")
    periods: List[Dict[str, Any]] = Field(default_factory=list, description="properties.periods")


class SnotelDataPoint(BaseModel):
    date: str = Field(..., description="Observation time as reported by AWDB")
    value: float = Field(..., description="Snow depth")


class EnrichedStation(BaseModel):
    """SNOTEL station annotated relative to the reference point"""
    model_config = ConfigDict(frozen=True)

    station_triplet: str = Field(..., description="AWDB station triplet, e.g. 898:WA:SNTL")
    name: str = Field(..., description="Station name (triplet when metadata is missing)")
    display_name: str = Field(..., description="Name with distance, direction and elevation")
    distance_miles: Optional[int] = Field(None, description="Distance from the reference point")
    direction: Optional[str] = Field(None, description="16-point compass direction from the reference point")
    elevation: Optional[float] = Field(None, description="Elevation in feet")
    data: List[SnotelDataPoint] = Field(default_factory=list, description="Non-null observations")


class SnotelResponse(BaseModel):
    stations: List[EnrichedStation] = Field(default_factory=list)
    unit: str = Field("in", description="Snow depth unit")
