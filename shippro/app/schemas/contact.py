"""
Contact Form Pydantic schemas.
"""

from pydantic import Field, EmailStr
from datetime import datetime
from typing import Optional, List
from shippro.app.schemas.base import CamelModel
from shippro.app.schemas.shipment import Pagination


class ContactFormCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    service_type: Optional[str] = Field(None, max_length=100)
    message: str = Field(..., min_length=1)


class ContactFormResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    service_type: Optional[str] = None
    message: str
    status: str
    created_at: datetime


class ContactFormCreated(CamelModel):
    id: str
    message: str


class ContactFormListResponse(CamelModel):
    data: List[ContactFormResponse]
    pagination: Pagination
