"""
Unit conversions for station readings.

Every conversion rounds to a fixed display precision with half-up rounding
(2.5 -> 3, -2.5 -> -2), so that values match what the station dashboard has
always shown. NaN and infinite inputs are returned as-is.
"""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals, ties toward positive infinity."""
    factor = 10 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        return scaled
    return math.floor(scaled + 0.5) / factor


def celsius_to_fahrenheit(celsius: float) -> float:
    return round_half_up(celsius * 9 / 5 + 32, 1)


def hpa_to_inhg(hpa: float) -> float:
    return round_half_up(hpa * 0.02953, 2)


def ms_to_mph(ms: float) -> float:
    return round_half_up(ms * 2.237, 1)


def mm_to_inches(mm: float) -> float:
    return round_half_up(mm * 0.03937, 2)


def km_to_miles(km: float) -> float:
    """Whole miles."""
    return round_half_up(km * 0.621371)


def whole_number(value: float) -> float:
    """Percentages, lux and W/m² are displayed without decimals."""
    return round_half_up(value)


def identity(value: float) -> float:
    return value
