"""
Database seeding script for the demo service catalog.

Installs Express Delivery, Standard Delivery and International Shipping
with fixed ids. Safe to run more than once.

    python -m shippro.seed_services
"""

import asyncio

from shippro.app.db.session import AsyncSessionLocal, Base, engine
from shippro.app.services.demo_data import DEMO_SERVICES, seed_demo_services

# Import models to ensure they are registered with Base
from shippro.app.models.service import Service  # noqa: F401
from shippro.app.models.shipment import Shipment  # noqa: F401
from shippro.app.models.tracking_event import TrackingEvent  # noqa: F401
from shippro.app.models.email_preferences import EmailPreferences  # noqa: F401
from shippro.app.models.contact_form import ContactForm  # noqa: F401


async def seed_services():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with AsyncSessionLocal() as db:
            print("🌱 Starting service catalog seeding...")
            created = await seed_demo_services(db)
    finally:
        await engine.dispose()

    if created == 0:
        print("ℹ️  Demo services already exist, skipping seeding")
        return

    print(f"\n🎉 Seeded {created} service(s):")
    for entry in DEMO_SERVICES:
        print(f"  - {entry['id']}  {entry['name']} ({entry['price']})")


if __name__ == "__main__":
    asyncio.run(seed_services())
