"""
API endpoints for station metrics
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Dict, List, Optional
import logging
import sentry_sdk

from app.core.exceptions import DataUnavailable
from app.models import ChartData, DashboardEntry, MetricId, StatSummary, WindDirection
from app.services.metrics_pipeline import MetricsPipeline, get_metrics_pipeline

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.get("/weather/metrics/{metric}", response_model=StatSummary)
async def get_metric_summary(
    metric: MetricId,
    pipeline: MetricsPipeline = Depends(get_metrics_pipeline),
):
    """Get the 24-hour summary for one metric"""
    try:
        return await pipeline.get_metric_summary(metric)
    except DataUnavailable as e:
        logger.error(f"Metric summary failed for {metric.value}: {e}")
        sentry_sdk.capture_exception(e)
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/weather/dashboard", response_model=Dict[str, DashboardEntry])
async def get_dashboard(
    metrics: Optional[List[MetricId]] = Query(None, description="Limit the dashboard to these metrics"),
    pipeline: MetricsPipeline = Depends(get_metrics_pipeline),
):
    """Get every dashboard card; each card reports its own error"""
    return await pipeline.get_dashboard(metrics)


@router.get("/weather/charts/{metric}", response_model=ChartData)
async def get_chart_data(
    metric: MetricId,
    days: int = Query(7, ge=1, description="History range in days"),
    pipeline: MetricsPipeline = Depends(get_metrics_pipeline),
):
    """Get mean/max/min chart history for one metric"""
    try:
        return await pipeline.get_chart_data(metric, days)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DataUnavailable as e:
        logger.error(f"Chart data failed for {metric.value}: {e}")
        sentry_sdk.capture_exception(e)
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/weather/wind-direction", response_model=WindDirection)
async def get_wind_direction(pipeline: MetricsPipeline = Depends(get_metrics_pipeline)):
    """Get the latest wind direction"""
    try:
        return await pipeline.get_wind_direction()
    except DataUnavailable as e:
        logger.error(f"Wind direction failed: {e}")
        sentry_sdk.capture_exception(e)
        raise HTTPException(status_code=503, detail=str(e))
