"""
SNOTEL snow depth service backed by the USDA AWDB REST API.
"""

import asyncio
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamHTTPFailure
from app.core.logging import get_logger
from app.models import SnotelDataPoint, SnotelResponse
from app.services.station_correlator import StationRecord, enrich_stations

logger = get_logger(__name__)

SOURCE_NAME = "SNOTEL"
SNOW_DEPTH_ELEMENT = "SNWD"
SNOW_DEPTH_UNIT = "in"


def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class SnotelService:
    """Fetches hourly snow depth for configured stations and correlates their metadata."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        station_triplets: Optional[List[str]] = None,
        lookback_days: Optional[int] = None,
        reference_point: Optional[tuple] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.snotel_base_url).rstrip("/")
        self.station_triplets = station_triplets or settings.snotel_triplets
        self.lookback_days = lookback_days if lookback_days is not None else settings.snotel_lookback_days
        self.reference_lat, self.reference_lon = reference_point or (
            settings.reference_latitude,
            settings.reference_longitude,
        )
        self.user_agent = settings.weather_user_agent
        self.timeout = settings.http_timeout
        self._transport = transport

    def _begin_date(self, today: Optional[date] = None) -> str:
        return ((today or date.today()) - timedelta(days=self.lookback_days)).isoformat()

    async def _fetch_station_metadata(self, client: httpx.AsyncClient) -> Dict[str, Dict[str, Any]]:
        """
        Fetch name, elevation and coordinates per triplet.

        Metadata only decorates station names, so any failure degrades to an
        empty mapping instead of failing the request.
        """
        params = {
            "stationTriplets": ",".join(self.station_triplets),
            "returnForecastPointMetadata": "false",
            "returnReservoirMetadata": "false",
            "returnStationElements": "false",
            "activeOnly": "true",
        }
        try:
            response = await client.get(f"{self.base_url}/stations", params=params)
        except httpx.HTTPError as e:
            logger.warning(f"SNOTEL station metadata unavailable: {e}")
            return {}
        if not response.is_success:
            logger.warning(f"SNOTEL station metadata returned HTTP {response.status_code}")
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"SNOTEL station metadata is not valid JSON: {e}")
            return {}
        if not isinstance(payload, list):
            logger.warning(f"SNOTEL station metadata has unexpected shape: {type(payload).__name__}")
            return {}

        metadata: Dict[str, Dict[str, Any]] = {}
        for station in payload:
            triplet = station.get("stationTriplet") if isinstance(station, dict) else None
            if triplet:
                metadata[triplet] = station
        return metadata

    async def _fetch_snow_depth(self, client: httpx.AsyncClient, begin_date: str) -> List[Dict[str, Any]]:
        params = {
            "stationTriplets": ",".join(self.station_triplets),
            "elements": SNOW_DEPTH_ELEMENT,
            "duration": "HOURLY",
            "beginDate": begin_date,
            "endDate": "0",  # 0 means the current date
            "returnFlags": "false",
            "returnOriginalValues": "false",
            "returnSuspectData": "false",
        }
        try:
            response = await client.get(f"{self.base_url}/data", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching SNOTEL data: {e}")
            raise UpstreamHTTPFailure(SOURCE_NAME, type(e).__name__) from e
        if not response.is_success:
            logger.error(f"SNOTEL data returned HTTP {response.status_code}")
            raise UpstreamHTTPFailure(SOURCE_NAME, response.status_code)
        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"SNOTEL data is not valid JSON: {e}")
            raise UpstreamHTTPFailure(SOURCE_NAME, "invalid JSON") from e
        if not isinstance(payload, list):
            logger.error(f"SNOTEL data has unexpected shape: {type(payload).__name__}")
            raise UpstreamHTTPFailure(SOURCE_NAME, "unexpected payload")
        return [station for station in payload if isinstance(station, dict)]

    @staticmethod
    def _to_record(station: Dict[str, Any], metadata: Dict[str, Any]) -> Optional[StationRecord]:
        triplet = station.get("stationTriplet")
        data = station.get("data")
        if not triplet or not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        values = data[0].get("values")
        if not isinstance(values, list):
            return None

        observations = []
        for entry in values:
            if not isinstance(entry, dict):
                continue
            value = _safe_float(entry.get("value"))
            if value is None or not entry.get("date"):
                continue
            observations.append(SnotelDataPoint(date=entry["date"], value=value))

        return StationRecord(
            triplet_id=triplet,
            name=metadata.get("name") or triplet,
            elevation=_safe_float(metadata.get("elevation")),
            latitude=_safe_float(metadata.get("latitude")),
            longitude=_safe_float(metadata.get("longitude")),
            observations=tuple(observations),
        )

    async def get_snow_depth(self, today: Optional[date] = None) -> SnotelResponse:
        """
        Get recent hourly snow depth for every configured station.

        Returns:
            SnotelResponse with stations that reported at least one value,
            each named with its distance and direction from the reference point

        Raises:
            UpstreamHTTPFailure: if the data endpoint fails
        """
        headers = {"User-Agent": self.user_agent}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=self._transport) as client:
            # Both calls finish before the shared client closes
            metadata, stations = await asyncio.gather(
                self._fetch_station_metadata(client),
                self._fetch_snow_depth(client, self._begin_date(today)),
                return_exceptions=True,
            )
        if isinstance(stations, BaseException):
            raise stations
        if isinstance(metadata, BaseException):
            logger.warning(f"SNOTEL station metadata unavailable: {metadata}")
            metadata = {}

        records = []
        for station in stations:
            record = self._to_record(station, metadata.get(station.get("stationTriplet"), {}))
            if record is not None:
                records.append(record)

        enriched = enrich_stations(records, self.reference_lat, self.reference_lon)
        logger.info(f"SNOTEL snow depth fetched for {len(enriched)} of {len(self.station_triplets)} stations")
        return SnotelResponse(stations=enriched, unit=SNOW_DEPTH_UNIT)


# Singleton instance
_snotel_service: Optional[SnotelService] = None


def get_snotel_service() -> SnotelService:
    """Get SNOTEL service instance."""
    global _snotel_service
    if _snotel_service is None:
        _snotel_service = SnotelService()
    return _snotel_service
