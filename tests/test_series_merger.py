"""
Tests for merging keyed aggregate series.
"""

from datetime import datetime, timezone

from app.services.series_merger import merge_series, reduce_to_keyed
from app.services.timeseries_query_service import Observation


class TestMergeSeries:

    def test_max_only_key_fills_high_and_low(self):
        points = merge_series(
            mean={"A": 10},
            maximum={"A": 12, "B": 5},
            minimum={"A": 8},
        )

        assert [p.key for p in points] == ["A", "B"]
        assert (points[0].high, points[0].low, points[0].avg) == (12, 8, 10)
        assert (points[1].high, points[1].low, points[1].avg) == (5, 5, None)

    def test_mean_fills_missing_max_and_min(self):
        points = merge_series(mean={"A": 3.5})
        assert len(points) == 1
        assert points[0].high == 3.5
        assert points[0].low == 3.5
        assert points[0].avg == 3.5

    def test_min_only_key(self):
        (point,) = merge_series(minimum={"A": -2})
        assert point.high == -2
        assert point.low == -2
        assert point.avg is None

    def test_keys_are_sorted_union(self):
        points = merge_series(
            mean={"2024-01-02T00:00": 1},
            maximum={"2024-01-01T12:00": 2},
            minimum={"2024-01-03T06:00": 0},
        )
        assert [p.key for p in points] == [
            "2024-01-01T12:00",
            "2024-01-02T00:00",
            "2024-01-03T06:00",
        ]

    def test_gaps_are_not_filled(self):
        points = merge_series(mean={"A": 1, "C": 3})
        assert [p.key for p in points] == ["A", "C"]

    def test_zero_values_are_present(self):
        (point,) = merge_series(mean={"A": 5}, maximum={"A": 0}, minimum={"A": 0})
        assert point.high == 0
        assert point.low == 0

    def test_empty_input(self):
        assert merge_series() == []

    def test_labels_are_attached(self):
        (point,) = merge_series(mean={"A": 1}, labels={"A": "3:00 PM"})
        assert point.label == "3:00 PM"


def test_reduce_to_keyed_last_observation_wins():
    observations = [
        Observation(datetime(2024, 1, 15, 0, 0, 10, tzinfo=timezone.utc), 1.0),
        Observation(datetime(2024, 1, 15, 0, 0, 50, tzinfo=timezone.utc), 2.0),
        Observation(datetime(2024, 1, 16, 0, 0, tzinfo=timezone.utc), 3.0),
    ]
    assert reduce_to_keyed(observations, include_time=False) == {
        "2024-01-15": 2.0,
        "2024-01-16": 3.0,
    }
