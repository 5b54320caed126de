"""
Shipment Management API Endpoints.

Signed-in users manage shipments; every by-id route accepts either the
internal id or the tracking number.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.guards import require_admin, require_session
from shippro.app.db.session import get_db
from shippro.app.domain.shipments import lifecycle
from shippro.app.domain.shipments.shipment_service import ShipmentService
from shippro.app.models.shipment import Shipment
from shippro.app.schemas.analytics import WorldShipmentResponse
from shippro.app.schemas.base import MessageResponse
from shippro.app.schemas.shipment import (
    ShipmentCreate,
    ShipmentDetailResponse,
    ShipmentFilters,
    ShipmentListResponse,
    ShipmentMutationResponse,
    ShipmentResponse,
    ShipmentUpdate,
    TrackingEventResponse,
)
from shippro.app.services import shipment_query
from shippro.app.services.export import EXPORT_FILENAME, shipments_to_csv
from shippro.app.services.notification_service import NotificationService
from shippro.app.services.world import world_shipments

router = APIRouter(prefix="/shipments", tags=["Shipments"])


async def _detail(db: AsyncSession, shipment: Shipment) -> ShipmentDetailResponse:
    """Shipment plus its timeline (oldest first) and progress."""
    events = await ShipmentService.list_events(db, shipment.id)
    base = ShipmentResponse.model_validate(shipment)
    return ShipmentDetailResponse(
        **base.model_dump(),
        tracking_events=[TrackingEventResponse.model_validate(e) for e in events],
        progress=lifecycle.progress(shipment.status),
    )


@router.get("", response_model=ShipmentListResponse)
async def list_shipments(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[str] = Query(None, alias="status", description="Status or 'all'"),
    search: Optional[str] = Query(None, description="Tracking number, name or email"),
    service_id: Optional[str] = Query(None, alias="serviceId"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """
    List shipments, newest first.

    Search is case-insensitive across tracking number, sender/receiver names
    and emails.
    """
    filters = ShipmentFilters(
        status=status_filter,
        search=search,
        service_id=service_id,
        date_from=date_from,
        date_to=date_to,
    )
    shipments, pagination = await shipment_query.list_shipments(db, filters, page=page, limit=limit)
    return ShipmentListResponse(
        data=[ShipmentResponse.model_validate(s) for s in shipments],
        pagination=pagination,
    )


@router.post("", response_model=ShipmentMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_shipment(
    shipment_data: ShipmentCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a shipment (status PENDING) with its first tracking event.

    A "created" email goes to sender, receiver and opted-in admins after the
    response.
    """
    shipment = await ShipmentService.create(db, shipment_data, created_by=principal.user_id)
    await NotificationService.schedule(db, background_tasks, shipment)

    return ShipmentMutationResponse(
        message="Shipment created successfully",
        shipment=await _detail(db, shipment),
    )


@router.post("/export")
async def export_shipments(
    filters: Optional[ShipmentFilters] = None,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """Every shipment matching the filters as a CSV attachment."""
    shipments = await shipment_query.all_matching(db, filters or ShipmentFilters())
    return Response(
        content=shipments_to_csv(shipments),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.get("/world", response_model=WorldShipmentResponse)
async def get_world_shipments(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Per-country shipment counts and revenue for the world map (admin-only)."""
    return await world_shipments(db)


@router.get("/{identifier}", response_model=ShipmentDetailResponse)
async def get_shipment(
    identifier: str,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    shipment = await ShipmentService.get_or_404(db, identifier)
    return await _detail(db, shipment)


@router.patch("/{identifier}", response_model=ShipmentMutationResponse)
async def update_shipment(
    identifier: str,
    update_data: ShipmentUpdate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a shipment. Only provided fields change.

    A status change appends one tracking event in the same commit and
    notifies the parties after the response.
    """
    change = await ShipmentService.update(db, identifier, update_data)
    if change.status_changed:
        await NotificationService.schedule(db, background_tasks, change.shipment)

    return ShipmentMutationResponse(
        message="Shipment updated successfully",
        shipment=await _detail(db, change.shipment),
    )


@router.delete("/{identifier}", response_model=MessageResponse)
async def delete_shipment(
    identifier: str,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """Delete a shipment and its tracking events."""
    await ShipmentService.delete(db, identifier)
    return MessageResponse(message="Shipment deleted successfully")
