"""
Shipment Notification Service.

Decides who hears about a shipment status change and sends the matching
lifecycle email. Planning reads the database and runs inside the request;
delivery runs afterwards as a background task and never raises.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import BackgroundTasks
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.config import settings
from shippro.app.db.session import utcnow
from shippro.app.models.email_preferences import EmailPreferences
from shippro.app.models.shipment import Shipment
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.services.email import EMAIL_TEMPLATES, send_email

logger = logging.getLogger("shippro.notifications")

STATUS_TEMPLATES = {
    ShipmentStatus.PENDING: "SHIPMENT_CREATED",
    ShipmentStatus.PICKED_UP: "SHIPMENT_PICKED_UP",
    ShipmentStatus.IN_TRANSIT: "SHIPMENT_IN_TRANSIT",
    ShipmentStatus.OUT_FOR_DELIVERY: "SHIPMENT_OUT_FOR_DELIVERY",
    ShipmentStatus.DELIVERED: "SHIPMENT_DELIVERED",
    ShipmentStatus.CANCELLED: "SHIPMENT_CANCELLED",
}

# EmailPreferences column gating each template
PREFERENCE_FLAGS = {
    "SHIPMENT_CREATED": "shipment_created",
    "SHIPMENT_PICKED_UP": "shipment_picked_up",
    "SHIPMENT_IN_TRANSIT": "shipment_in_transit",
    "SHIPMENT_OUT_FOR_DELIVERY": "shipment_out_for_delivery",
    "SHIPMENT_DELIVERED": "shipment_delivered",
    "SHIPMENT_CANCELLED": "shipment_cancelled",
}

STATUS_LABELS = {
    "SHIPMENT_CREATED": "created",
    "SHIPMENT_PICKED_UP": "picked up",
    "SHIPMENT_IN_TRANSIT": "in transit",
    "SHIPMENT_OUT_FOR_DELIVERY": "out for delivery",
    "SHIPMENT_DELIVERED": "delivered",
    "SHIPMENT_CANCELLED": "cancelled",
}


@dataclass
class Recipient:
    email: str
    name: str
    kind: str  # sender, receiver or admin


@dataclass
class NotificationPlan:
    """Everything needed to send one status notification after the response."""
    tracking_number: str
    template_type: str
    recipients: List[Recipient]
    variables: Dict[str, str] = field(default_factory=dict)


def template_for_status(status: ShipmentStatus) -> Optional[str]:
    return STATUS_TEMPLATES.get(status)


def _format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "TBD"


def build_variables(shipment: Shipment, now: Optional[datetime] = None) -> Dict[str, str]:
    """Template variables shared by every recipient of a shipment notification."""
    now = now or utcnow()
    sender = shipment.sender_address or {}
    receiver = shipment.receiver_address or {}
    current = shipment.current_location

    if isinstance(current, dict):
        current_location = current.get("name") or "In Transit"
    else:
        current_location = current or "In Transit"

    tracking_url = f"{settings.app_url}/tracking?trackingNumber={shipment.tracking_number}"

    return {
        "trackingNumber": shipment.tracking_number,
        "serviceName": shipment.service.name if shipment.service else "Shipping Service",
        "senderName": shipment.sender_name,
        "senderCity": sender.get("city", ""),
        "senderCountry": sender.get("country", ""),
        "receiverName": shipment.receiver_name,
        "receiverCity": receiver.get("city", ""),
        "receiverCountry": receiver.get("country", ""),
        "weight": str(shipment.weight or 0),
        "estimatedCost": str(shipment.estimated_cost or 0),
        "currency": shipment.currency or "USD",
        "estimatedDelivery": _format_date(shipment.estimated_delivery),
        "trackingUrl": tracking_url,
        "feedbackUrl": f"{settings.app_url}/contact",
        "pickupTime": now.strftime("%Y-%m-%d %H:%M UTC"),
        "pickupLocation": (
            f"{sender.get('city', '')}, {sender.get('country', '')}" if sender else "Pickup Location"
        ),
        "currentLocation": current_location,
        "lastUpdate": now.strftime("%Y-%m-%d %H:%M UTC"),
        "deliveryAddress": (
            f"{receiver.get('street', '')}, {receiver.get('city', '')}, {receiver.get('country', '')}"
            if receiver else "Delivery Address"
        ),
        "expectedDelivery": _format_date(shipment.estimated_delivery),
        "deliveryTime": now.strftime("%Y-%m-%d %H:%M UTC"),
        "deliveredTo": shipment.receiver_name,
        "cancellationDate": now.strftime("%Y-%m-%d"),
        "cancellationReason": "Please contact support for details",
    }


class NotificationService:

    @staticmethod
    async def admin_recipients(db: AsyncSession) -> List[Recipient]:
        """Admins who opted into shipment notifications."""
        result = await db.execute(
            select(EmailPreferences).where(EmailPreferences.admin_notifications == True)  # noqa: E712
        )
        return [
            Recipient(email=prefs.email, name="Admin", kind="admin")
            for prefs in result.scalars().all()
            if prefs.email
        ]

    @staticmethod
    async def preferences_by_email(db: AsyncSession, emails: List[str]) -> Dict[str, EmailPreferences]:
        """Stored preferences keyed by lower-cased email."""
        if not emails:
            return {}
        lowered = [e.lower() for e in emails]
        result = await db.execute(
            select(EmailPreferences).where(func.lower(EmailPreferences.email).in_(lowered))
        )
        return {prefs.email.lower(): prefs for prefs in result.scalars().all()}

    @staticmethod
    async def plan(db: AsyncSession, shipment: Shipment, status: ShipmentStatus) -> Optional[NotificationPlan]:
        """
        Work out which recipients get which template for a status.

        Sender and receiver are always candidates, opted-in admins are added,
        duplicates (by email, case-insensitive) are dropped, and each
        candidate's flag for the event gates the send. Recipients without a
        preferences record get the defaults (all events on).

        Returns:
            The plan, or None when the status has no template or nobody is left
        """
        template_type = template_for_status(status)
        if template_type is None:
            logger.debug(f"No email template for status {status}")
            return None

        candidates = [
            Recipient(email=shipment.sender_email, name=shipment.sender_name, kind="sender"),
            Recipient(email=shipment.receiver_email, name=shipment.receiver_name, kind="receiver"),
        ]
        candidates.extend(await NotificationService.admin_recipients(db))

        unique: List[Recipient] = []
        seen = set()
        for recipient in candidates:
            key = recipient.email.lower()
            if key not in seen:
                seen.add(key)
                unique.append(recipient)

        preferences = await NotificationService.preferences_by_email(db, [r.email for r in unique])
        flag = PREFERENCE_FLAGS[template_type]

        recipients = []
        for recipient in unique:
            prefs = preferences.get(recipient.email.lower())
            if prefs is not None and not getattr(prefs, flag):
                logger.debug(f"{recipient.email} opted out of {template_type}")
                continue
            recipients.append(recipient)

        if not recipients:
            return None

        return NotificationPlan(
            tracking_number=shipment.tracking_number,
            template_type=template_type,
            recipients=recipients,
            variables=build_variables(shipment),
        )

    @staticmethod
    async def deliver(plan: NotificationPlan) -> int:
        """
        Send a planned notification to every recipient.

        Runs as a background task; failures are logged, never raised.

        Returns:
            Number of emails sent successfully
        """
        template = EMAIL_TEMPLATES[plan.template_type]
        try:
            results = await asyncio.gather(*[
                send_email(recipient.email, template, {**plan.variables, "recipientName": recipient.name})
                for recipient in plan.recipients
            ])
        except Exception:
            logger.exception(f"Error sending notifications for shipment {plan.tracking_number}")
            return 0

        sent = sum(1 for ok in results if ok)
        logger.info(
            f"Email notifications sent: {sent}/{len(plan.recipients)} for shipment "
            f"{plan.tracking_number} ({STATUS_LABELS[plan.template_type]})"
        )
        return sent

    @staticmethod
    async def schedule(db: AsyncSession, background_tasks: BackgroundTasks, shipment: Shipment) -> Optional[NotificationPlan]:
        """Plan now, deliver after the response. Planning errors are logged only."""
        try:
            plan = await NotificationService.plan(db, shipment, shipment.status)
        except SQLAlchemyError:
            logger.exception(f"Could not plan notifications for shipment {shipment.tracking_number}")
            return None

        if plan is not None:
            background_tasks.add_task(NotificationService.deliver, plan)
        return plan
