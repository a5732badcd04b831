"""
Station Metrics Service - Main FastAPI Application

Turns raw weather station time-series into display-ready statistics and
correlates nearby snow stations with a fixed reference point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
from dotenv import load_dotenv
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
import logging

from app.api import v1
from app.core.config import settings
from app.services.timeseries_query_service import get_timeseries_query_service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1,  # 10% of transactions
        environment=settings.environment,
    )

# Create FastAPI application
app = FastAPI(
    title="Station Metrics Service",
    description="Time-series metric aggregation and station correlation for a personal weather station",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, message, **extra) -> JSONResponse:
    content = {
        "error": True,
        "status_code": status_code,
        "message": message,
        "path": str(request.url)
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


# Global exception handlers to ensure JSON responses
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON responses"""
    logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    return _error_response(request, exc.status_code, exc.detail)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON responses"""
    logger.error(f"Validation Error: {exc.errors()}")
    return _error_response(request, 422, "Validation error", details=jsonable_encoder(exc.errors()))

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions and return JSON responses"""
    logger.error(f"Unhandled Exception: {type(exc).__name__}: {str(exc)}")
    sentry_sdk.capture_exception(exc)
    return _error_response(request, 500, "Internal server error")

# Include API routes
app.include_router(v1.router, prefix="/api/v1")

@app.on_event("shutdown")
async def shutdown_event():
    """Release the time-series client on shutdown."""
    try:
        await get_timeseries_query_service().close()
        logger.info("Time-series client closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")

@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": "Station Metrics Service",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "station-metrics-service",
        "version": "1.0.0",
        "station": settings.station_id
    }

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
