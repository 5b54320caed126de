"""
Analytics Service for the admin dashboard.

Handles data aggregation for dashboard widgets.
Focused on READ-ONLY operations.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.config import settings
from shippro.app.db.session import utcnow
from shippro.app.domain.shipments import lifecycle
from shippro.app.models.contact_form import ContactForm
from shippro.app.models.service import Service
from shippro.app.models.shipment import Shipment
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.models.tracking_event import TrackingEvent
from shippro.app.schemas.analytics import (
    ActiveShipmentSummary,
    ChartPoint,
    DashboardStats,
    RecentActivity,
    ShipmentTrends,
    TopService,
    VehicleStats,
)
from shippro.app.schemas.shipment import TrackingEventResponse
from shippro.app.schemas.tracking import TrackingParty, TrackingServiceInfo
from shippro.app.services.demo_data import DEMO_VEHICLE_STATS

# timeframe -> (bucket length, bucket count)
CHART_TIMEFRAMES = {
    "daily": (timedelta(days=1), 10),
    "weekly": (timedelta(days=7), 8),
    "monthly": (timedelta(days=30), 6),
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def _count(db: AsyncSession, *conditions) -> int:
    query = select(func.count(Shipment.id))
    if conditions:
        query = query.where(and_(*conditions))
    return (await db.execute(query)).scalar() or 0


class AnalyticsService:

    @staticmethod
    async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
        """Headline counters, revenue, 7-day trends, top services and recent activity."""
        now = utcnow()

        total = await _count(db)
        pending = await _count(db, Shipment.status == ShipmentStatus.PENDING)
        in_transit = await _count(db, Shipment.status.in_(lifecycle.ACTIVE_STATUSES))
        delivered = await _count(db, Shipment.status == ShipmentStatus.DELIVERED)
        cancelled = await _count(db, Shipment.status == ShipmentStatus.CANCELLED)

        # Delivered revenue: final cost where known, estimated cost otherwise
        final_sum = (await db.execute(
            select(func.sum(Shipment.final_cost)).where(
                Shipment.status == ShipmentStatus.DELIVERED,
                Shipment.final_cost.is_not(None),
            )
        )).scalar() or 0.0
        estimated_sum = (await db.execute(
            select(func.sum(Shipment.estimated_cost)).where(
                Shipment.status == ShipmentStatus.DELIVERED,
                Shipment.final_cost.is_(None),
            )
        )).scalar() or 0.0

        new_contacts = (await db.execute(
            select(func.count(ContactForm.id)).where(ContactForm.created_at >= now - timedelta(days=30))
        )).scalar() or 0

        # 7-day trends
        recent = (await db.execute(
            select(Shipment.created_at, Shipment.estimated_cost, Shipment.final_cost)
            .where(Shipment.created_at >= now - timedelta(days=7))
            .order_by(Shipment.created_at.asc())
        )).all()

        shipments_by_date: Dict[str, int] = defaultdict(int)
        revenue_by_date: Dict[str, float] = defaultdict(float)
        for created_at, estimated_cost, final_cost in recent:
            day = created_at.strftime("%Y-%m-%d")
            shipments_by_date[day] += 1
            revenue = final_cost or estimated_cost
            if revenue:
                revenue_by_date[day] += revenue

        # Top services by shipment count
        shipment_count = func.count(Shipment.id).label("shipment_count")
        top_rows = (await db.execute(
            select(Service.name, Service.description, shipment_count)
            .outerjoin(Shipment, Shipment.service_id == Service.id)
            .group_by(Service.id, Service.name, Service.description)
            .order_by(shipment_count.desc(), Service.name.asc())
            .limit(5)
        )).all()

        # Latest tracking events with their shipment
        activity_rows = (await db.execute(
            select(TrackingEvent, Shipment.tracking_number, Shipment.sender_name, Shipment.receiver_name)
            .join(Shipment, Shipment.id == TrackingEvent.shipment_id)
            .order_by(TrackingEvent.timestamp.desc())
            .limit(10)
        )).all()

        return DashboardStats(
            total_shipments=total,
            pending_shipments=pending,
            in_transit_shipments=in_transit,
            delivered_shipments=delivered,
            cancelled_shipments=cancelled,
            revenue=float(final_sum) + float(estimated_sum),
            new_contacts=new_contacts,
            trends=ShipmentTrends(
                shipments_by_date=dict(shipments_by_date),
                revenue_by_date=dict(revenue_by_date),
            ),
            top_services=[
                TopService(name=name, description=description, count=count)
                for name, description, count in top_rows
            ],
            recent_activity=[
                RecentActivity(
                    id=event.id,
                    status=event.status,
                    description=event.description,
                    timestamp=event.timestamp,
                    tracking_number=tracking_number,
                    sender_name=sender_name,
                    receiver_name=receiver_name,
                )
                for event, tracking_number, sender_name, receiver_name in activity_rows
            ],
        )

    @staticmethod
    async def get_most_recent_active(db: AsyncSession) -> Optional[ActiveShipmentSummary]:
        """Newest shipment still on the road, with its five latest events."""
        result = await db.execute(
            select(Shipment)
            .where(Shipment.status.in_(lifecycle.ACTIVE_STATUSES))
            .order_by(Shipment.created_at.desc())
            .limit(1)
        )
        shipment = result.scalar_one_or_none()
        if shipment is None:
            return None

        events = (await db.execute(
            select(TrackingEvent)
            .where(TrackingEvent.shipment_id == shipment.id)
            .order_by(TrackingEvent.timestamp.desc())
            .limit(5)
        )).scalars().all()

        return ActiveShipmentSummary(
            tracking_number=shipment.tracking_number,
            status=shipment.status,
            estimated_delivery=shipment.estimated_delivery,
            current_location=shipment.current_location,
            events=[TrackingEventResponse.model_validate(e) for e in events],
            progress=lifecycle.progress(shipment.status),
            sender=TrackingParty(name=shipment.sender_name, address=shipment.sender_address),
            receiver=TrackingParty(name=shipment.receiver_name, address=shipment.receiver_address),
            service=(
                TrackingServiceInfo(name=shipment.service.name, description=shipment.service.description)
                if shipment.service else None
            ),
        )

    @staticmethod
    async def get_chart_data(db: AsyncSession, timeframe: str = "daily") -> List[ChartPoint]:
        """
        Shipments created and deliveries completed per bucket.

        daily: 10 one-day buckets; weekly: 8 seven-day buckets;
        monthly: 6 thirty-day buckets. Unknown timeframes fall back to daily.
        """
        if timeframe not in CHART_TIMEFRAMES:
            timeframe = "daily"
        bucket, count = CHART_TIMEFRAMES[timeframe]
        now = utcnow()
        start = now - bucket * count

        created = (await db.execute(
            select(Shipment.created_at).where(Shipment.created_at >= start)
        )).scalars().all()
        delivered = (await db.execute(
            select(Shipment.actual_delivery).where(
                Shipment.status == ShipmentStatus.DELIVERED,
                Shipment.actual_delivery >= start,
            )
        )).scalars().all()

        created = [_as_utc(c) for c in created]
        delivered = [_as_utc(d) for d in delivered if d is not None]

        points = []
        for i in range(count):
            period_start = start + bucket * i
            period_end = period_start + bucket

            if timeframe == "daily":
                label = f"{period_start.month}/{period_start.day}"
            elif timeframe == "weekly":
                label = f"Week {i + 1}"
            else:
                label = period_start.strftime("%b")

            points.append(ChartPoint(
                date=label,
                shipments=sum(1 for c in created if period_start <= c < period_end),
                deliveries=sum(1 for d in delivered if period_start <= d < period_end),
            ))
        return points

    @staticmethod
    def get_vehicle_stats() -> VehicleStats:
        """There is no vehicle store; demo figures only when demo data is on."""
        if settings.seed_demo_data:
            return DEMO_VEHICLE_STATS.model_copy()
        return VehicleStats()
