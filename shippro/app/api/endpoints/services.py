"""
Service Catalog API Endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.guards import require_admin, require_session
from shippro.app.db.session import get_db
from shippro.app.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServiceMutationResponse,
    ServiceResponse,
)
from shippro.app.services.catalog import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


@router.get("", response_model=ServiceListResponse)
async def list_services(
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """Active services by name. An empty catalog returns an empty list."""
    services = await CatalogService.list_active(db)
    return ServiceListResponse(data=[ServiceResponse.model_validate(s) for s in services])


@router.post("", response_model=ServiceMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    service_data: ServiceCreate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = await CatalogService.create(db, service_data)
    return ServiceMutationResponse(
        message="Service created successfully",
        service=ServiceResponse.model_validate(service),
    )
