"""
API Router.

Aggregates all API endpoints.
"""

from fastapi import APIRouter
from shippro.app.api.endpoints import (
    shipments, tracking, services, email_preferences, email, admin, contact
)

router = APIRouter()

# Shipments (list, create, export, world map, by id or tracking number)
router.include_router(shipments.router)

# Public tracking
router.include_router(tracking.router)

# Service catalog
router.include_router(services.router)

# Notifications
router.include_router(email_preferences.router)
router.include_router(email.router)

# Admin dashboard
router.include_router(admin.router)

# Leads
router.include_router(contact.router)
