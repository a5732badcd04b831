"""
Merge independently queried aggregate series into composite chart points.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from app.core.time_buckets import format_time_key
from app.models import SeriesPoint

KeyedSeries = Mapping[str, float]


def reduce_to_keyed(observations: Iterable, include_time: bool) -> Dict[str, float]:
    """
    Reduce observations into a TimeKey -> value mapping.

    Later observations win when two timestamps truncate to the same key.
    """
    keyed: Dict[str, float] = {}
    for observation in observations:
        keyed[format_time_key(observation.timestamp, include_time)] = observation.value
    return keyed


def merge_series(
    mean: Optional[KeyedSeries] = None,
    maximum: Optional[KeyedSeries] = None,
    minimum: Optional[KeyedSeries] = None,
    labels: Optional[Mapping[str, str]] = None,
) -> List[SeriesPoint]:
    """
    Combine up to three keyed series into ordered points.

    For every key present in any series:
        high = max[key], else mean[key], else min[key], else 0
        low  = min[key], else mean[key], else max[key], else 0
        avg  = mean[key], else absent

    A key held by a single series therefore reports that value as both high
    and low. Keys missing from every series are not emitted; nothing is
    interpolated.
    """
    mean = mean or {}
    maximum = maximum or {}
    minimum = minimum or {}
    labels = labels or {}

    keys = sorted(set(mean) | set(maximum) | set(minimum))

    points: List[SeriesPoint] = []
    for key in keys:
        avg = mean.get(key)
        high = _first_present(maximum.get(key), avg, minimum.get(key))
        low = _first_present(minimum.get(key), avg, maximum.get(key))
        points.append(
            SeriesPoint(
                key=key,
                high=high if high is not None else 0,
                low=low if low is not None else 0,
                avg=avg,
                label=labels.get(key),
            )
        )
    return points


def _first_present(*values: Optional[float]) -> Optional[float]:
    for value in values:
        if value is not None:
            return value
    return None
