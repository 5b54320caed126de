"""
Service catalog operations.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.models.service import Service
from shippro.app.schemas.service import ServiceCreate


class CatalogService:

    @staticmethod
    async def list_active(db: AsyncSession) -> List[Service]:
        """Active services ordered by name. An empty catalog gives an empty list."""
        result = await db.execute(
            select(Service).where(Service.active == True).order_by(Service.name.asc())  # noqa: E712
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: ServiceCreate) -> Service:
        service = Service(
            name=data.name,
            description=data.description,
            features=list(data.features),
            price=data.price,
            icon=data.icon,
            active=data.active,
        )
        db.add(service)
        await db.commit()
        await db.refresh(service)
        return service
