"""
API endpoints for upstream forecast and snow depth providers
"""

from fastapi import APIRouter, Depends, HTTPException
import sentry_sdk

from app.core.exceptions import UpstreamHTTPFailure
from app.core.logging import get_logger
from app.models import NWSForecast, SnotelResponse
from app.services.nws_forecast_service import NWSForecastService, get_nws_forecast_service
from app.services.snotel_service import SnotelService, get_snotel_service

logger = get_logger(__name__)

# Create router
router = APIRouter()


@router.get("/forecast", response_model=NWSForecast)
async def get_forecast(service: NWSForecastService = Depends(get_nws_forecast_service)):
    """Get the NWS gridpoint forecast"""
    try:
        return await service.get_forecast()
    except UpstreamHTTPFailure as e:
        logger.error(f"NWS forecast failed: {e}")
        sentry_sdk.capture_exception(e)
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/snotel/snow-depth", response_model=SnotelResponse)
async def get_snow_depth(service: SnotelService = Depends(get_snotel_service)):
    """Get recent snow depth from nearby SNOTEL stations"""
    try:
        return await service.get_snow_depth()
    except UpstreamHTTPFailure as e:
        logger.error(f"SNOTEL snow depth failed: {e}")
        sentry_sdk.capture_exception(e)
        raise HTTPException(status_code=502, detail=str(e))
