"""
Tests for unit conversions.
"""

import math

import pytest

from app.core import units


class TestRoundHalfUp:
    """Half-up rounding used by every display conversion."""

    @pytest.mark.parametrize("value,digits,expected", [
        (2.5, 0, 3.0),
        (-2.5, 0, -2.0),
        (2.4, 0, 2.0),
        (0.125, 2, 0.13),
        (1.05, 1, 1.1),
    ])
    def test_ties_round_toward_positive_infinity(self, value, digits, expected):
        assert units.round_half_up(value, digits) == pytest.approx(expected)

    def test_non_finite_values_pass_through(self):
        assert math.isnan(units.round_half_up(float("nan"), 1))
        assert units.round_half_up(float("inf"), 2) == float("inf")
        assert units.round_half_up(float("-inf")) == float("-inf")


class TestConversions:
    """Station unit to display unit conversions."""

    def test_celsius_to_fahrenheit(self):
        assert units.celsius_to_fahrenheit(0) == 32.0
        assert units.celsius_to_fahrenheit(100) == 212.0
        assert units.celsius_to_fahrenheit(-40) == -40.0
        assert units.celsius_to_fahrenheit(21.5) == pytest.approx(70.7)

    def test_hpa_to_inhg(self):
        assert units.hpa_to_inhg(1013.25) == pytest.approx(29.92)

    def test_ms_to_mph(self):
        assert units.ms_to_mph(10) == pytest.approx(22.4)
        assert units.ms_to_mph(0) == 0

    def test_mm_to_inches(self):
        assert units.mm_to_inches(25.4) == pytest.approx(1.0)
        assert units.mm_to_inches(0.2) == pytest.approx(0.01)

    def test_km_to_miles_is_whole(self):
        assert units.km_to_miles(1) == 1
        assert units.km_to_miles(10) == 6
        assert units.km_to_miles(16.1) == 10

    def test_whole_number(self):
        assert units.whole_number(64.5) == 65
        assert units.whole_number(64.4) == 64

    def test_identity(self):
        assert units.identity(7.25) == 7.25
