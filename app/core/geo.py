"""
Great-circle math and compass classification.

Two compass classifiers live here and are intentionally kept apart:

- ``bearing_to_compass16`` snaps a bearing to the nearest of 16 points by
  rounding; station correlation uses it.
- ``degrees_to_cardinal`` walks an explicit table of half-open
  ``[min, max)`` bins; wind direction readings use it.
"""

import math
from typing import NamedTuple, Tuple

from app.core.units import round_half_up

EARTH_RADIUS_MILES = 3959.0

COMPASS_16: Tuple[str, ...] = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


class CardinalBin(NamedTuple):
    min: float
    max: float
    short: str
    full: str


CARDINAL_DIRECTIONS: Tuple[CardinalBin, ...] = (
    CardinalBin(0, 11.25, "N", "North"),
    CardinalBin(11.25, 33.75, "NNE", "North-Northeast"),
    CardinalBin(33.75, 56.25, "NE", "Northeast"),
    CardinalBin(56.25, 78.75, "ENE", "East-Northeast"),
    CardinalBin(78.75, 101.25, "E", "East"),
    CardinalBin(101.25, 123.75, "ESE", "East-Southeast"),
    CardinalBin(123.75, 146.25, "SE", "Southeast"),
    CardinalBin(146.25, 168.75, "SSE", "South-Southeast"),
    CardinalBin(168.75, 191.25, "S", "South"),
    CardinalBin(191.25, 213.75, "SSW", "South-Southwest"),
    CardinalBin(213.75, 236.25, "SW", "Southwest"),
    CardinalBin(236.25, 258.75, "WSW", "West-Southwest"),
    CardinalBin(258.75, 281.25, "W", "West"),
    CardinalBin(281.25, 303.75, "WNW", "West-Northwest"),
    CardinalBin(303.75, 326.25, "NW", "Northwest"),
    CardinalBin(326.25, 348.75, "NNW", "North-Northwest"),
    CardinalBin(348.75, 360, "N", "North"),
)

_NORTH = CARDINAL_DIRECTIONS[0]


def haversine_distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance between two points in miles."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) * math.sin(dlat / 2) + math.cos(
        math.radians(lat1)
    ) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) * math.sin(dlon / 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def initial_bearing_degrees(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Forward azimuth from point 1 toward point 2, normalized to [0, 360)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    y = math.sin(dlon) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def bearing_to_compass16(bearing: float) -> str:
    """Nearest 16-point compass name; sectors are 22.5° wide and centered on each point."""
    index = int(round_half_up(bearing / 22.5)) % 16
    return COMPASS_16[index]


def degrees_to_cardinal(degrees: float) -> CardinalBin:
    """Classify a wind direction against the half-open bin table, defaulting to north."""
    normalized = ((degrees % 360) + 360) % 360
    for direction in CARDINAL_DIRECTIONS:
        if direction.min <= normalized < direction.max:
            return direction
    return _NORTH
