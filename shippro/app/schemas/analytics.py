"""
Analytics Schemas for the admin dashboard.
"""

from pydantic import Field
from typing import Any, List, Dict, Optional, Tuple
from datetime import datetime
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.schemas.base import CamelModel
from shippro.app.schemas.shipment import TrackingEventResponse
from shippro.app.schemas.tracking import TrackingParty, TrackingServiceInfo


class ShipmentTrends(CamelModel):
    """Daily series keyed by YYYY-MM-DD."""
    shipments_by_date: Dict[str, int]
    revenue_by_date: Dict[str, float]


class TopService(CamelModel):
    name: str
    count: int
    description: str


class RecentActivity(CamelModel):
    id: str
    status: str
    description: Optional[str] = None
    timestamp: datetime
    tracking_number: str
    sender_name: str
    receiver_name: str


class DashboardStats(CamelModel):
    """Headline numbers for the admin dashboard."""
    total_shipments: int
    pending_shipments: int
    in_transit_shipments: int
    delivered_shipments: int
    cancelled_shipments: int
    revenue: float
    new_contacts: int
    trends: ShipmentTrends
    top_services: List[TopService]
    recent_activity: List[RecentActivity]


class ActiveShipmentSummary(CamelModel):
    """Most recent shipment still on the road."""
    tracking_number: str
    status: ShipmentStatus
    estimated_delivery: Optional[datetime] = None
    current_location: Optional[Any] = None
    events: List[TrackingEventResponse]
    progress: int
    sender: TrackingParty
    receiver: TrackingParty
    service: Optional[TrackingServiceInfo] = None


class ChartPoint(CamelModel):
    date: str
    shipments: int
    deliveries: int


class VehicleStats(CamelModel):
    total_vehicles: int = 0
    active_vehicles: int = 0
    on_route_vehicles: int = 0
    maintenance_vehicles: int = 0
    trend: float = 0.0


class CountryShipmentStats(CamelModel):
    """Per-country involvement (a shipment counts for both of its countries)."""
    country: str
    country_code: str
    shipment_count: int
    total_revenue: float
    sent_from: int
    received_in: int
    coordinates: Tuple[float, float] = (0.0, 0.0)


class WorldShipmentResponse(CamelModel):
    total_shipments: int
    total_revenue: float
    countries: List[CountryShipmentStats] = Field(default_factory=list)
