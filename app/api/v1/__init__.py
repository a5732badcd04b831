"""
API v1 router
"""

from fastapi import APIRouter
from . import forecast, weather

# Create v1 router
router = APIRouter()

# Include all v1 endpoints
router.include_router(weather.router, tags=["weather"])
router.include_router(forecast.router, tags=["forecast"])
