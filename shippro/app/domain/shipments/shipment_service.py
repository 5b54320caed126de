"""
Shipment Service (Domain Logic).

Creation, lookup, updates and status transitions for shipments. A shipment's
current state and its tracking event log are always written in the same
transaction.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.exceptions import ResourceNotFoundError, ValidationError
from shippro.app.db.session import utcnow
from shippro.app.domain.shipments import lifecycle
from shippro.app.models.service import Service
from shippro.app.models.shipment import Shipment
from shippro.app.models.shipment_enums import ShipmentStatus, PaymentStatus
from shippro.app.models.tracking_event import TrackingEvent
from shippro.app.schemas.shipment import Location, ShipmentCreate, ShipmentUpdate

logger = logging.getLogger("shippro.shipments")

CREATED_EVENT_STATUS = "Shipment created"
CREATED_EVENT_DESCRIPTION = "Shipment has been created and is pending pickup"
LOCATION_EVENT_STATUS = "Location updated"


@dataclass
class StatusChange:
    """Result of a mutation that may have moved a shipment to a new status."""
    shipment: Shipment
    previous_status: ShipmentStatus
    event: Optional[TrackingEvent] = None

    @property
    def status_changed(self) -> bool:
        return self.shipment.status != self.previous_status


def location_to_json(location: Union[Location, str, None]) -> Any:
    """Free-text locations are stored as-is, structured ones as camelCase JSON."""
    if location is None or isinstance(location, str):
        return location
    return location.model_dump(mode="json", by_alias=True, exclude_none=True)


def location_label(location_json: Any) -> str:
    if isinstance(location_json, dict):
        return location_json.get("name") or "unknown location"
    return str(location_json)


def location_event(shipment: Shipment, location_json: Any, description: Optional[str] = None) -> TrackingEvent:
    return TrackingEvent(
        shipment_id=shipment.id,
        status=LOCATION_EVENT_STATUS,
        description=description or f"Shipment location updated to {location_label(location_json)}",
        location=location_json,
    )


class ShipmentService:

    @staticmethod
    async def generate_tracking_number(db: AsyncSession) -> str:
        """
        Build ``SP`` + the last nine digits of the current millisecond clock.

        The candidate is bumped by one millisecond until no existing shipment
        carries it.
        """
        millis = int(time.time() * 1000)
        while True:
            candidate = lifecycle.tracking_number_from_millis(millis)
            result = await db.execute(
                select(Shipment.id).where(Shipment.tracking_number == candidate)
            )
            if result.scalar_one_or_none() is None:
                return candidate
            millis += 1

    @staticmethod
    async def resolve(db: AsyncSession, identifier: str) -> Optional[Shipment]:
        """
        Find a shipment by internal id or tracking number.

        A 24-hex identifier is tried as an id first; on a miss (or for any
        other shape) it is upper-cased and matched against tracking numbers.
        """
        if lifecycle.looks_like_object_id(identifier):
            shipment = await db.get(Shipment, identifier.lower())
            if shipment is not None:
                return shipment

        result = await db.execute(
            select(Shipment).where(
                Shipment.tracking_number == lifecycle.normalize_tracking_number(identifier)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_or_404(db: AsyncSession, identifier: str) -> Shipment:
        shipment = await ShipmentService.resolve(db, identifier)
        if shipment is None:
            raise ResourceNotFoundError("Shipment", identifier)
        return shipment

    @staticmethod
    async def list_events(db: AsyncSession, shipment_id: str, newest_first: bool = False) -> List[TrackingEvent]:
        order = TrackingEvent.timestamp.desc() if newest_first else TrackingEvent.timestamp.asc()
        result = await db.execute(
            select(TrackingEvent).where(TrackingEvent.shipment_id == shipment_id).order_by(order)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: ShipmentCreate, created_by: Optional[str] = None) -> Shipment:
        """
        Create a PENDING shipment together with its "Shipment created" event.

        Raises:
            ResourceNotFoundError: serviceId does not name a known service
        """
        service = await db.get(Service, data.service_id)
        if service is None:
            raise ResourceNotFoundError("Service", data.service_id)

        tracking_number = await ShipmentService.generate_tracking_number(db)

        shipment = Shipment(
            tracking_number=tracking_number,
            status=lifecycle.INITIAL_STATUS,
            sender_name=data.sender_name,
            sender_email=data.sender_email,
            sender_phone=data.sender_phone,
            sender_address=data.sender_address.model_dump(mode="json", by_alias=True, exclude_none=True),
            receiver_name=data.receiver_name,
            receiver_email=data.receiver_email,
            receiver_phone=data.receiver_phone,
            receiver_address=data.receiver_address.model_dump(mode="json", by_alias=True, exclude_none=True),
            service_id=data.service_id,
            service=service,
            shipment_type=data.shipment_type,
            shipment_mode=data.shipment_mode,
            weight=data.weight,
            dimensions=data.dimensions.model_dump(mode="json", by_alias=True) if data.dimensions else None,
            value=data.value,
            description=data.description,
            special_instructions=data.special_instructions,
            estimated_cost=data.estimated_cost,
            currency=data.currency.upper(),
            payment_status=PaymentStatus.PENDING,
            payment_mode=data.payment_mode,
            estimated_delivery=data.estimated_delivery,
            route=[],
            created_by=created_by,
        )
        db.add(shipment)
        await db.flush()

        db.add(TrackingEvent(
            shipment_id=shipment.id,
            status=CREATED_EVENT_STATUS,
            description=CREATED_EVENT_DESCRIPTION,
        ))

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(shipment)
        logger.info(f"Created shipment {shipment.tracking_number} ({shipment.id})")
        return shipment

    @staticmethod
    async def update(db: AsyncSession, identifier: str, data: ShipmentUpdate) -> StatusChange:
        """
        Apply an admin edit. Only provided fields change.

        When the status moves, one "Status updated to X" event is appended in
        the same commit. A new location alone appends one "Location updated"
        event instead.
        """
        shipment = await ShipmentService.get_or_404(db, identifier)
        previous_status = shipment.status
        fields = data.model_dump(exclude_unset=True, exclude_none=True)

        new_status = fields.pop("status", None)
        if new_status is not None and new_status != previous_status:
            ShipmentService._check_transition(shipment, new_status)
            shipment.status = new_status
            if new_status == ShipmentStatus.DELIVERED and shipment.actual_delivery is None and "actual_delivery" not in fields:
                shipment.actual_delivery = utcnow()

        location_moved = False
        if data.current_location is not None:
            location_json = location_to_json(data.current_location)
            location_moved = location_json != shipment.current_location
            shipment.current_location = location_json
            fields.pop("current_location", None)

        for key, value in fields.items():
            setattr(shipment, key, value)
        shipment.updated_at = utcnow()

        event = None
        if shipment.status != previous_status:
            event = TrackingEvent(
                shipment_id=shipment.id,
                status=f"Status updated to {shipment.status.value}",
                description=f"Shipment status changed from {previous_status.value} to {shipment.status.value}",
                location=shipment.current_location,
            )
            db.add(event)
        elif location_moved:
            event = location_event(shipment, shipment.current_location)
            db.add(event)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(shipment)
        return StatusChange(shipment=shipment, previous_status=previous_status, event=event)

    @staticmethod
    async def apply_status_change(
        db: AsyncSession,
        identifier: str,
        status: Optional[ShipmentStatus] = None,
        location: Union[Location, str, None] = None,
        description: Optional[str] = None,
    ) -> StatusChange:
        """
        Move a shipment through its lifecycle and record the tracking event.

        Flow:
        1. Resolve the shipment (404 when absent)
        2. Reject changes to DELIVERED/CANCELLED shipments
        3. Write status/location, bump updatedAt
        4. Append one TrackingEvent when a status, location or description was given
        5. Commit both at once

        Notification dispatch is left to the caller, which checks
        ``status_changed`` on the result.
        """
        shipment = await ShipmentService.get_or_404(db, identifier)
        previous_status = shipment.status
        tracking_number = shipment.tracking_number

        if status is not None and status != previous_status:
            ShipmentService._check_transition(shipment, status)
            shipment.status = status
            if status == ShipmentStatus.DELIVERED and shipment.actual_delivery is None:
                shipment.actual_delivery = utcnow()

        location_json = location_to_json(location)
        if location_json is not None:
            shipment.current_location = location_json
        shipment.updated_at = utcnow()

        event = None
        if status is None and not description and location_json is not None:
            event = location_event(shipment, location_json)
            db.add(event)
        elif status is not None or description:
            event = TrackingEvent(
                shipment_id=shipment.id,
                status=status.value if status is not None else "Status updated",
                description=description or lifecycle.default_event_description(shipment.status),
                location=location_json,
            )
            db.add(event)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error(f"Status change for {tracking_number} rolled back")
            raise

        await db.refresh(shipment)
        if previous_status != shipment.status:
            logger.info(
                f"Shipment {tracking_number}: {previous_status.value} -> {shipment.status.value}"
            )
        return StatusChange(shipment=shipment, previous_status=previous_status, event=event)

    @staticmethod
    async def delete(db: AsyncSession, identifier: str) -> None:
        """Remove a shipment, deleting its tracking events first."""
        shipment = await ShipmentService.get_or_404(db, identifier)
        shipment_id = shipment.id

        await db.execute(delete(TrackingEvent).where(TrackingEvent.shipment_id == shipment_id))
        await db.delete(shipment)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Deleted shipment {shipment_id}")

    @staticmethod
    def _check_transition(shipment: Shipment, new_status: ShipmentStatus) -> None:
        if not lifecycle.can_transition(shipment.status, new_status):
            raise ValidationError(
                f"Cannot change status of a {shipment.status.value} shipment",
                field="status",
            )
