"""
Contact Form API Endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.guards import require_admin
from shippro.app.db.session import get_db
from shippro.app.schemas.contact import (
    ContactFormCreate,
    ContactFormCreated,
    ContactFormListResponse,
    ContactFormResponse,
)
from shippro.app.services.contact import list_contact_forms, submit_contact_form

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("", response_model=ContactFormCreated, status_code=status.HTTP_201_CREATED)
async def create_contact_form(
    form_data: ContactFormCreate,
    db: AsyncSession = Depends(get_db)
):
    """Public quote/contact request."""
    form = await submit_contact_form(db, form_data)
    return ContactFormCreated(id=form.id, message="Contact form submitted successfully")


@router.get("", response_model=ContactFormListResponse)
async def get_contact_forms(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    forms, pagination = await list_contact_forms(db, page=page, limit=limit)
    return ContactFormListResponse(
        data=[ContactFormResponse.model_validate(f) for f in forms],
        pagination=pagination,
    )
