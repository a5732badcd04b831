"""
Station metadata correlation relative to a fixed reference point.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from app.core.geo import bearing_to_compass16, haversine_distance_miles, initial_bearing_degrees
from app.core.units import round_half_up
from app.models import EnrichedStation, SnotelDataPoint


@dataclass(frozen=True)
class StationRecord:
    """A remote station with optional metadata and its observations."""

    triplet_id: str
    name: str
    elevation: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    observations: Tuple[SnotelDataPoint, ...] = field(default_factory=tuple)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


def format_elevation(elevation: float) -> str:
    """Thousands-separated feet, e.g. 3500 -> '3,500'."""
    if float(elevation).is_integer():
        return f"{int(elevation):,}"
    return f"{round(elevation, 3):,}"


def build_display_name(
    name: str,
    elevation: Optional[float] = None,
    distance_miles: Optional[int] = None,
    direction: Optional[str] = None,
) -> str:
    """
    Compose the station label:

        "{name} ({distance} mi {direction}, {elevation} ft)"
        "{name} ({distance} mi {direction})"   elevation unknown
        "{name} ({elevation} ft)"              coordinates unknown
        "{name}"                               nothing known
    """
    if distance_miles is not None and direction is not None:
        if elevation is not None:
            return f"{name} ({distance_miles} mi {direction}, {format_elevation(elevation)} ft)"
        return f"{name} ({distance_miles} mi {direction})"
    if elevation is not None:
        return f"{name} ({format_elevation(elevation)} ft)"
    return name


def enrich_station(record: StationRecord, reference_lat: float, reference_lon: float) -> EnrichedStation:
    """Annotate one station with distance and direction measured from the reference point."""
    distance: Optional[int] = None
    direction: Optional[str] = None
    if record.has_coordinates:
        miles = haversine_distance_miles(reference_lat, reference_lon, record.latitude, record.longitude)
        bearing = initial_bearing_degrees(reference_lat, reference_lon, record.latitude, record.longitude)
        distance = int(round_half_up(miles))
        direction = bearing_to_compass16(bearing)

    return EnrichedStation(
        station_triplet=record.triplet_id,
        name=record.name,
        display_name=build_display_name(record.name, record.elevation, distance, direction),
        distance_miles=distance,
        direction=direction,
        elevation=record.elevation,
        data=list(record.observations),
    )


def enrich_stations(
    records: Iterable[StationRecord],
    reference_lat: float,
    reference_lon: float,
) -> List[EnrichedStation]:
    """Enrich stations in input order, dropping those without observations."""
    return [
        enrich_station(record, reference_lat, reference_lon)
        for record in records
        if record.observations
    ]
