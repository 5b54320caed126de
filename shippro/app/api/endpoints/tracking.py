"""
Public Tracking API Endpoints.

Anyone with a tracking number can follow a shipment; status updates
against a tracking number are admin-only.
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.guards import require_admin
from shippro.app.db.session import get_db
from shippro.app.domain.shipments import lifecycle
from shippro.app.domain.shipments.shipment_service import ShipmentService
from shippro.app.schemas.shipment import ShipmentResponse, TrackingEventResponse
from shippro.app.schemas.tracking import (
    TrackingParty,
    TrackingResponse,
    TrackingServiceInfo,
    TrackingUpdate,
    TrackingUpdateResponse,
)
from shippro.app.services.notification_service import NotificationService

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.get("/{tracking_number}", response_model=TrackingResponse)
async def track_shipment(
    tracking_number: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Public tracking view: status, progress, route and the full event
    timeline (oldest first).
    """
    shipment = await ShipmentService.get_or_404(db, tracking_number)
    events = await ShipmentService.list_events(db, shipment.id)

    return TrackingResponse(
        tracking_number=shipment.tracking_number,
        status=shipment.status,
        estimated_delivery=shipment.estimated_delivery,
        actual_delivery=shipment.actual_delivery,
        current_location=shipment.current_location,
        route=shipment.route or [],
        events=[TrackingEventResponse.model_validate(e) for e in events],
        progress=lifecycle.progress(shipment.status),
        sender=TrackingParty(name=shipment.sender_name, address=shipment.sender_address),
        receiver=TrackingParty(name=shipment.receiver_name, address=shipment.receiver_address),
        service=(
            TrackingServiceInfo(name=shipment.service.name, description=shipment.service.description)
            if shipment.service else None
        ),
        weight=shipment.weight,
        dimensions=shipment.dimensions,
        estimated_cost=shipment.estimated_cost,
        final_cost=shipment.final_cost,
    )


@router.patch("/{tracking_number}", response_model=TrackingUpdateResponse)
async def update_tracking(
    tracking_number: str,
    update: TrackingUpdate,
    background_tasks: BackgroundTasks,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a status and/or location change (admin-only).

    Status, location and the new tracking event are committed together.
    Parties are emailed after the response when the status actually moved.
    """
    change = await ShipmentService.apply_status_change(
        db,
        tracking_number,
        status=update.status,
        location=update.location,
        description=update.description,
    )
    if change.status_changed:
        await NotificationService.schedule(db, background_tasks, change.shipment)

    return TrackingUpdateResponse(
        message="Tracking information updated successfully",
        shipment=ShipmentResponse.model_validate(change.shipment),
    )
