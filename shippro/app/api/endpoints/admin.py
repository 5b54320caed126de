"""
Admin Dashboard API Endpoints.

Read-only analytics for the admin dashboard.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.exceptions import ResourceNotFoundError
from shippro.app.core.guards import require_admin
from shippro.app.db.session import get_db
from shippro.app.schemas.analytics import ActiveShipmentSummary, ChartPoint, DashboardStats, VehicleStats
from shippro.app.services.analytics import AnalyticsService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Shipment counters, delivered revenue, trends, top services and recent activity."""
    return await AnalyticsService.get_dashboard_stats(db)


@router.get("/most-recent-shipment", response_model=ActiveShipmentSummary)
async def get_most_recent_shipment(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    summary = await AnalyticsService.get_most_recent_active(db)
    if summary is None:
        raise ResourceNotFoundError("Active shipment")
    return summary


@router.get("/analytics/chart", response_model=List[ChartPoint])
async def get_chart_data(
    timeframe: str = Query("daily", description="daily, weekly or monthly"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_chart_data(db, timeframe)


@router.get("/vehicles/stats", response_model=VehicleStats)
async def get_vehicle_stats(admin: Principal = Depends(require_admin)):
    """Zeroed counters; demo figures only when demo data is enabled."""
    return AnalyticsService.get_vehicle_stats()
