"""
Email Preferences API Endpoints.

Each signed-in user manages their own lifecycle email opt-ins.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.dependencies import Principal
from shippro.app.core.guards import require_session
from shippro.app.db.session import get_db
from shippro.app.schemas.base import MessageResponse
from shippro.app.schemas.email_preferences import (
    EmailPreferencesMutationResponse,
    EmailPreferencesResponse,
    EmailPreferencesUpdate,
)
from shippro.app.services import email_preferences as preferences_service

router = APIRouter(prefix="/email-preferences", tags=["Email Preferences"])


@router.get("", response_model=EmailPreferencesResponse)
async def get_email_preferences(
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    """Stored preferences, or the defaults when the user has none yet."""
    prefs = await preferences_service.get_preferences(db, principal.user_id)
    if prefs is None:
        return preferences_service.default_preferences(principal.user_id, principal.email)
    return EmailPreferencesResponse.model_validate(prefs)


@router.post("", response_model=EmailPreferencesMutationResponse)
async def save_email_preferences(
    update: EmailPreferencesUpdate,
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    prefs = await preferences_service.save_preferences(db, principal.user_id, update)
    return EmailPreferencesMutationResponse(
        message="Email preferences updated successfully",
        preferences=EmailPreferencesResponse.model_validate(prefs),
    )


@router.delete("", response_model=MessageResponse)
async def delete_email_preferences(
    principal: Principal = Depends(require_session),
    db: AsyncSession = Depends(get_db)
):
    await preferences_service.delete_preferences(db, principal.user_id)
    return MessageResponse(message="Email preferences deleted successfully")
