"""
Time bucketing: aggregation window selection and TimeKey formatting.

TimeKeys are UTC strings whose lexicographic order equals chronological
order (``YYYY-MM-DDTHH:MM`` or ``YYYY-MM-DD``). Clock labels such as
``3:00 PM`` are for display only and never used to merge series.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from app.core.exceptions import InvalidRange


@dataclass(frozen=True)
class AggregationWindow:
    """How a history range is reduced into chart points."""

    every: timedelta
    include_time: bool


def select_aggregation_window(days: int) -> AggregationWindow:
    """
    Map a requested history range to an aggregation window.

    Keeps charts at roughly 90-120 points regardless of range:
    1 day -> 15m (96), 7 days -> 2h (84), 30 days -> 6h (120), 90 days -> 1d (90).

    Raises:
        InvalidRange: if ``days`` is less than 1
    """
    if days < 1:
        raise InvalidRange(days)
    if days == 1:
        return AggregationWindow(timedelta(minutes=15), True)
    if days <= 7:
        return AggregationWindow(timedelta(hours=2), True)
    if days <= 30:
        return AggregationWindow(timedelta(hours=6), True)
    return AggregationWindow(timedelta(days=1), False)


def _ensure_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def format_time_key(timestamp: datetime, include_time: bool) -> str:
    """Sortable UTC key, truncated to the minute or to the date."""
    utc = _ensure_utc(timestamp)
    if include_time:
        return utc.strftime("%Y-%m-%dT%H:%M")
    return utc.strftime("%Y-%m-%d")


def format_clock_label(timestamp: datetime, tz: Optional[tzinfo] = None) -> str:
    """12-hour wall-clock hour label, e.g. ``12:00 AM`` or ``3:00 PM``."""
    local = _ensure_utc(timestamp).astimezone(tz or timezone.utc)
    hours = local.hour
    ampm = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:00 {ampm}"
