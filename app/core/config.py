"""
Configuration management for Station Metrics Service
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # Service configuration
    app_name: str = "Station Metrics Service"
    debug: bool = False
    environment: str = "development"

    # Error tracking
    sentry_dsn: Optional[str] = None

    # InfluxDB (time-series store) configuration
    influxdb_url: str = "http://localhost:8086"
    influxdb_token: str = ""
    influxdb_org: str = ""
    influxdb_bucket: str = "weather"
    influxdb_measurement: str = "weather"
    influxdb_timeout_ms: int = 10_000
    station_id: str = "ST-00190461"

    # Clock labels ("3:00 PM") are rendered in this zone
    display_timezone: str = "UTC"

    # Upstream HTTP providers
    weather_user_agent: str = "(Station Metrics Service, ops@example.com)"  # Required by NWS
    http_timeout: float = 30.0

    # NWS gridpoint forecast
    nws_forecast_url: str = "https://api.weather.gov/gridpoints/SEW/139,58/forecast"

    # SNOTEL / AWDB snow depth
    snotel_base_url: str = "https://wcc.sc.egov.usda.gov/awdbRestApi/services/v1"
    snotel_station_triplets: str = "898:WA:SNTL,899:WA:SNTL,912:WA:SNTL"
    snotel_lookback_days: int = 3

    # Fixed reference point for station correlation (Rattlesnake Mountain)
    reference_latitude: float = 47.470597
    reference_longitude: float = -121.825356

    @property
    def snotel_triplets(self) -> List[str]:
        """Parse comma-separated station triplets into a list."""
        return [t.strip() for t in self.snotel_station_triplets.split(",") if t.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False

# Global settings instance
settings = Settings()
