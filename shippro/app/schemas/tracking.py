"""
Public tracking Pydantic schemas.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import Field
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.schemas.base import CamelModel
from shippro.app.schemas.shipment import LocationInput, TrackingEventResponse, ShipmentResponse


class TrackingUpdate(CamelModel):
    """Status/location update posted against a tracking number."""
    status: Optional[ShipmentStatus] = None
    location: Optional[LocationInput] = None
    description: Optional[str] = Field(None, max_length=1000)


class TrackingParty(CamelModel):
    name: str
    address: Optional[Dict[str, Any]] = None


class TrackingServiceInfo(CamelModel):
    name: str
    description: str


class TrackingResponse(CamelModel):
    """What a customer sees when tracking a shipment."""
    tracking_number: str
    status: ShipmentStatus
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    current_location: Optional[Any] = None
    route: List[Any] = Field(default_factory=list)
    events: List[TrackingEventResponse]
    progress: int
    sender: TrackingParty
    receiver: TrackingParty
    service: Optional[TrackingServiceInfo] = None
    weight: float
    dimensions: Optional[Dict[str, Any]] = None
    estimated_cost: float
    final_cost: Optional[float] = None


class TrackingUpdateResponse(CamelModel):
    message: str
    shipment: ShipmentResponse
