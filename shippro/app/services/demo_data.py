"""
Demo data for first-run installs.

Nothing here is served implicitly: the catalog is installed by
``python -m shippro.seed_services`` or at startup when ``SEED_DEMO_DATA`` is
enabled, and vehicle figures are only reported in demo mode.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.models.service import Service
from shippro.app.schemas.analytics import VehicleStats

logger = logging.getLogger("shippro.demo")

DEMO_SERVICES = [
    {
        "id": "507f1f77bcf86cd799439011",
        "name": "Express Delivery",
        "description": "Fast delivery service",
        "features": ["Same day pickup", "Priority handling", "Real-time tracking"],
        "price": "$25.00",
        "icon": "🚀",
    },
    {
        "id": "507f1f77bcf86cd799439012",
        "name": "Standard Delivery",
        "description": "Regular delivery service",
        "features": ["Standard pickup", "Reliable delivery", "Tracking updates"],
        "price": "$15.00",
        "icon": "📦",
    },
    {
        "id": "507f1f77bcf86cd799439013",
        "name": "International Shipping",
        "description": "International delivery service",
        "features": ["Global coverage", "Customs handling", "Multi-language support"],
        "price": "$35.00",
        "icon": "🌍",
    },
]

DEMO_VEHICLE_STATS = VehicleStats(
    total_vehicles=89,
    active_vehicles=67,
    on_route_vehicles=45,
    maintenance_vehicles=12,
    trend=2.29,
)


async def seed_demo_services(db: AsyncSession) -> int:
    """
    Install the demo catalog. Services that already exist (by id) are left
    alone, so running this twice is harmless.

    Returns:
        Number of services created
    """
    created = 0
    for entry in DEMO_SERVICES:
        if await db.get(Service, entry["id"]) is not None:
            continue
        db.add(Service(active=True, **entry))
        created += 1

    if created:
        await db.commit()
    logger.info(f"Demo catalog: {created} service(s) created")
    return created
