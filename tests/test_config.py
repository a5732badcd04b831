"""
Tests for settings loading.
"""

from app.core.config import Settings
from app.services.metrics_pipeline import StationQueryConfig


def test_defaults():
    config = Settings(_env_file=None)

    assert config.influxdb_bucket == "weather"
    assert config.station_id == "ST-00190461"
    assert config.snotel_lookback_days == 3
    assert config.nws_forecast_url.endswith("/gridpoints/SEW/139,58/forecast")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("INFLUXDB_BUCKET", "backyard")
    monkeypatch.setenv("station_id", "ST-42")

    config = Settings(_env_file=None)

    assert config.influxdb_bucket == "backyard"
    assert config.station_id == "ST-42"


def test_snotel_triplets_are_split():
    config = Settings(_env_file=None, snotel_station_triplets=" 898:WA:SNTL, ,899:WA:SNTL ")
    assert config.snotel_triplets == ["898:WA:SNTL", "899:WA:SNTL"]


def test_station_query_config_from_settings():
    config = Settings(
        _env_file=None,
        influxdb_bucket="b",
        influxdb_measurement="m",
        station_id="ST-1",
        display_timezone="UTC",
    )

    assert StationQueryConfig.from_settings(config) == StationQueryConfig(
        bucket="b", measurement="m", station="ST-1", display_timezone="UTC",
    )
