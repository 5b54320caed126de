"""
Email preference storage (one record per user).
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.exceptions import ResourceNotFoundError
from shippro.app.models.email_preferences import EmailPreferences
from shippro.app.schemas.email_preferences import EmailPreferencesResponse, EmailPreferencesUpdate

PREFERENCE_FIELDS = (
    "shipment_created",
    "shipment_picked_up",
    "shipment_in_transit",
    "shipment_out_for_delivery",
    "shipment_delivered",
    "shipment_cancelled",
    "admin_notifications",
)


def default_preferences(user_id: str, email: Optional[str] = None) -> EmailPreferencesResponse:
    """What a user without a stored record gets: every event on, admin digest off."""
    return EmailPreferencesResponse(
        user_id=user_id,
        email=email or "",
        shipment_created=True,
        shipment_picked_up=True,
        shipment_in_transit=True,
        shipment_out_for_delivery=True,
        shipment_delivered=True,
        shipment_cancelled=True,
        admin_notifications=False,
    )


async def get_preferences(db: AsyncSession, user_id: str) -> Optional[EmailPreferences]:
    result = await db.execute(select(EmailPreferences).where(EmailPreferences.user_id == user_id))
    return result.scalar_one_or_none()


async def save_preferences(db: AsyncSession, user_id: str, data: EmailPreferencesUpdate) -> EmailPreferences:
    """Upsert. Flags missing from the payload take their defaults."""
    prefs = await get_preferences(db, user_id)
    if prefs is None:
        prefs = EmailPreferences(user_id=user_id)
        db.add(prefs)

    prefs.email = data.email
    for name in PREFERENCE_FIELDS:
        setattr(prefs, name, getattr(data, name))

    await db.commit()
    await db.refresh(prefs)
    return prefs


async def delete_preferences(db: AsyncSession, user_id: str) -> None:
    prefs = await get_preferences(db, user_id)
    if prefs is None:
        raise ResourceNotFoundError("Email preferences", user_id)
    await db.delete(prefs)
    await db.commit()
