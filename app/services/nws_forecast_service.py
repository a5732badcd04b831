"""
NWS gridpoint forecast service.
"""

from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamHTTPFailure
from app.core.logging import get_logger
from app.models import NWSForecast

logger = get_logger(__name__)

SOURCE_NAME = "NWS forecast"


class NWSForecastService:
    """Fetches the fixed gridpoint forecast from api.weather.gov."""

    def __init__(
        self,
        forecast_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.forecast_url = forecast_url or settings.nws_forecast_url
        self.user_agent = settings.weather_user_agent
        self.timeout = settings.http_timeout
        self._transport = transport

    async def get_forecast(self) -> NWSForecast:
        """
        Get the gridpoint forecast.

        Returns:
            NWSForecast with generatedAt, updateTime and the periods exactly
            as NWS returned them

        Raises:
            UpstreamHTTPFailure: on a non-success status or transport error
        """
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/geo+json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.forecast_url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching NWS forecast from {self.forecast_url}: {e}")
            raise UpstreamHTTPFailure(SOURCE_NAME, type(e).__name__) from e

        if not response.is_success:
            logger.error(f"NWS forecast returned HTTP {response.status_code}")
            raise UpstreamHTTPFailure(SOURCE_NAME, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"NWS forecast is not valid JSON: {e}")
            raise UpstreamHTTPFailure(SOURCE_NAME, "invalid JSON") from e
        properties = (body.get("properties") or {}) if isinstance(body, dict) else None
        periods = (properties.get("periods") or []) if isinstance(properties, dict) else None
        if not isinstance(periods, list):
            logger.error("NWS forecast has no properties object with a periods list")
            raise UpstreamHTTPFailure(SOURCE_NAME, "unexpected payload")

        forecast = NWSForecast(
            generated_at=properties.get("generatedAt"),
            update_time=properties.get("updateTime"),
            periods=periods,
        )
        logger.info(f"NWS forecast fetched with {len(forecast.periods)} periods")
        return forecast


# Singleton instance
_nws_forecast_service: Optional[NWSForecastService] = None


def get_nws_forecast_service() -> NWSForecastService:
    """Get NWS forecast service instance."""
    global _nws_forecast_service
    if _nws_forecast_service is None:
        _nws_forecast_service = NWSForecastService()
    return _nws_forecast_service
