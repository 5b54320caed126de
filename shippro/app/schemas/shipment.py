"""
Shipment Pydantic schemas.

Defines request and response models for shipment management.
"""

from pydantic import Field, EmailStr, AliasChoices, field_validator
from datetime import datetime
from typing import Optional, List, Union, Dict, Any
from shippro.app.models.shipment_enums import ShipmentStatus, PaymentStatus
from shippro.app.schemas.base import CamelModel
from shippro.app.schemas.service import ServiceResponse


def reject_control_characters(value: str) -> str:
    """Names and address parts are single-line text."""
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in value):
        raise ValueError("must not contain line breaks or control characters")
    return value


class Coordinates(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Address(CamelModel):
    """Postal address embedded in a shipment."""
    street: str
    city: str
    state: str = ""
    postal_code: str = ""
    country: str
    coordinates: Optional[Coordinates] = None

    @field_validator("street", "city", "state", "postal_code", "country")
    @classmethod
    def single_line_text(cls, v: str) -> str:
        return reject_control_characters(v)


class Dimensions(CamelModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: str = "cm"


class Location(CamelModel):
    """A named point on a shipment's route."""
    name: str
    address: Optional[Address] = None
    coordinates: Optional[Coordinates] = None
    timestamp: Optional[datetime] = None


# Free text ("Chicago hub") or a structured location
LocationInput = Union[Location, str]


class ShipmentCreate(CamelModel):
    """Schema for creating a new shipment."""
    sender_name: str = Field(..., min_length=1, max_length=255)
    sender_email: EmailStr
    sender_phone: Optional[str] = Field(None, max_length=50)
    sender_address: Address

    receiver_name: str = Field(..., min_length=1, max_length=255)
    receiver_email: EmailStr
    receiver_phone: Optional[str] = Field(None, max_length=50)
    receiver_address: Address

    service_id: str = Field(..., min_length=1)
    shipment_type: str = "INTERNATIONAL_SHIPPING"
    shipment_mode: str = "LAND_SHIPPING"

    weight: float = Field(..., gt=0, description="Weight in kilograms")
    dimensions: Optional[Dimensions] = None
    value: Optional[float] = Field(None, ge=0, description="Declared value")
    description: str = Field(..., min_length=1)
    special_instructions: Optional[str] = None

    estimated_cost: float = Field(0.0, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    payment_mode: str = "CARD"
    estimated_delivery: Optional[datetime] = None

    @field_validator("sender_name", "receiver_name", "sender_phone", "receiver_phone")
    @classmethod
    def single_line_text(cls, v: Optional[str]) -> Optional[str]:
        return reject_control_characters(v) if v is not None else v


class ShipmentUpdate(CamelModel):
    """Schema for updating an existing shipment (only provided fields change)."""
    status: Optional[ShipmentStatus] = None
    current_location: Optional[LocationInput] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    final_cost: Optional[float] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    special_instructions: Optional[str] = None


class TrackingEventResponse(CamelModel):
    """Schema for one tracking event."""
    id: str
    shipment_id: str
    status: str
    description: Optional[str] = None
    location: Optional[Any] = None
    timestamp: datetime


class ShipmentResponse(CamelModel):
    """Schema for shipment response."""
    id: str
    tracking_number: str
    status: ShipmentStatus

    sender_name: str
    sender_email: str
    sender_phone: Optional[str] = None
    sender_address: Optional[Dict[str, Any]] = None

    receiver_name: str
    receiver_email: str
    receiver_phone: Optional[str] = None
    receiver_address: Optional[Dict[str, Any]] = None

    service_id: str
    service: Optional[ServiceResponse] = None
    shipment_type: str
    shipment_mode: str

    weight: float
    dimensions: Optional[Dict[str, Any]] = None
    value: Optional[float] = None
    description: str
    special_instructions: Optional[str] = None

    estimated_cost: float
    final_cost: Optional[float] = None
    currency: str
    payment_status: PaymentStatus
    payment_mode: str

    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    current_location: Optional[Any] = None
    route: List[Any] = Field(default_factory=list)

    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ShipmentDetailResponse(ShipmentResponse):
    """Shipment with its full event timeline (oldest first)."""
    tracking_events: List[TrackingEventResponse] = Field(default_factory=list)
    progress: int = 0


class ShipmentMutationResponse(CamelModel):
    message: str
    shipment: ShipmentDetailResponse


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ShipmentListResponse(CamelModel):
    """Schema for paginated shipment list."""
    data: List[ShipmentResponse]
    pagination: Pagination


class ShipmentFilters(CamelModel):
    """Filters shared by the listing and the CSV export."""
    status: Optional[str] = None
    search: Optional[str] = None
    service_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("serviceId", "service_id", "service")
    )
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
