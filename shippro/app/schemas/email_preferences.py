"""
Email Preferences Pydantic schemas.
"""

from pydantic import EmailStr
from typing import Optional
from shippro.app.schemas.base import CamelModel


class EmailPreferencesUpdate(CamelModel):
    """
    Schema for saving preferences.

    Omitted flags fall back to their defaults rather than keeping stored values.
    """
    email: EmailStr
    shipment_created: bool = True
    shipment_picked_up: bool = True
    shipment_in_transit: bool = True
    shipment_out_for_delivery: bool = True
    shipment_delivered: bool = True
    shipment_cancelled: bool = True
    admin_notifications: bool = False


class EmailPreferencesResponse(CamelModel):
    user_id: str
    email: str
    shipment_created: bool
    shipment_picked_up: bool
    shipment_in_transit: bool
    shipment_out_for_delivery: bool
    shipment_delivered: bool
    shipment_cancelled: bool
    admin_notifications: bool


class EmailPreferencesMutationResponse(CamelModel):
    message: str
    preferences: EmailPreferencesResponse


class EmailTestRequest(CamelModel):
    to: EmailStr
    template_type: str = "SHIPMENT_CREATED"


class EmailTestResponse(CamelModel):
    success: bool
    message: str
    template_type: Optional[str] = None
