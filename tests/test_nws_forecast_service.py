"""
Tests for the NWS forecast service
"""

import pytest
import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamHTTPFailure
from app.services.nws_forecast_service import NWSForecastService


class TestNWSForecastService:
    """Test NWS forecast fetching."""

    @pytest.fixture
    def sample_forecast(self):
        """Sample NWS gridpoint forecast response."""
        return {
            "properties": {
                "generatedAt": "2024-01-15T12:34:56+00:00",
                "updateTime": "2024-01-15T11:00:00+00:00",
                "periods": [
                    {
                        "number": 1,
                        "name": "This Afternoon",
                        "temperature": 41,
                        "temperatureUnit": "F",
                        "windSpeed": "5 mph",
                        "windDirection": "SW",
                        "shortForecast": "Light Rain",
                        "isDaytime": True,
                    },
                    {
                        "number": 2,
                        "name": "Tonight",
                        "temperature": 33,
                        "temperatureUnit": "F",
                        "windSpeed": "3 mph",
                        "windDirection": "S",
                        "shortForecast": "Rain And Snow",
                        "isDaytime": False,
                    },
                ],
            }
        }

    @pytest.mark.asyncio
    async def test_get_forecast(self, sample_forecast):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=sample_forecast)

        service = NWSForecastService(transport=httpx.MockTransport(handler))
        forecast = await service.get_forecast()

        assert forecast.generated_at == "2024-01-15T12:34:56+00:00"
        assert forecast.update_time == "2024-01-15T11:00:00+00:00"
        assert forecast.periods == sample_forecast["properties"]["periods"]

        (request,) = requests
        assert request.url.host == "api.weather.gov"
        assert request.url.path.endswith("/forecast")
        assert request.headers["User-Agent"] == settings.weather_user_agent
        assert request.headers["Accept"] == "application/geo+json"

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        service = NWSForecastService(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="Internal Error"))
        )

        with pytest.raises(UpstreamHTTPFailure) as exc_info:
            await service.get_forecast()

        assert exc_info.value.status == 500
        assert str(exc_info.value) == "Failed to fetch NWS forecast data: 500"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = NWSForecastService(transport=httpx.MockTransport(handler))

        with pytest.raises(UpstreamHTTPFailure) as exc_info:
            await service.get_forecast()

        assert exc_info.value.status == "ConnectError"

    @pytest.mark.asyncio
    async def test_missing_periods(self):
        service = NWSForecastService(
            forecast_url="https://api.weather.gov/gridpoints/SEW/1,1/forecast",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"properties": {}})),
        )

        forecast = await service.get_forecast()

        assert forecast.periods == []
        assert forecast.generated_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json=[1, 2]),
        httpx.Response(200, json={"properties": ["not", "an", "object"]}),
        httpx.Response(200, json={"properties": {"periods": "none"}}),
        httpx.Response(200, text="<html>maintenance</html>"),
    ])
    async def test_malformed_body(self, response):
        service = NWSForecastService(transport=httpx.MockTransport(lambda request: response))

        with pytest.raises(UpstreamHTTPFailure) as exc_info:
            await service.get_forecast()

        assert exc_info.value.source == "NWS forecast"
