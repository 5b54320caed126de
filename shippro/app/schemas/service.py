"""
Service catalog Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional, List
from shippro.app.schemas.base import CamelModel


class ServiceCreate(CamelModel):
    """Schema for creating a new service."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    features: List[str] = Field(default_factory=list)
    price: Optional[str] = Field(None, max_length=50, description="Display price, e.g. '$25.00'")
    icon: Optional[str] = Field(None, max_length=16)
    active: bool = True


class ServiceResponse(CamelModel):
    """Schema for service response."""
    id: str
    name: str
    description: str
    features: List[str]
    price: Optional[str] = None
    icon: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime


class ServiceListResponse(CamelModel):
    data: List[ServiceResponse]


class ServiceMutationResponse(CamelModel):
    message: str
    service: ServiceResponse
