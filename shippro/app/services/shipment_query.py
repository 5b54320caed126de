"""
Shipment listing filters shared by the admin table and the CSV export.
"""

import math
from datetime import time
from typing import List, Tuple

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.core.exceptions import ValidationError
from shippro.app.models.shipment import Shipment
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.schemas.shipment import Pagination, ShipmentFilters

SEARCH_COLUMNS = (
    Shipment.tracking_number,
    Shipment.sender_name,
    Shipment.receiver_name,
    Shipment.sender_email,
    Shipment.receiver_email,
)


def contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally, escaped with a backslash."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_conditions(filters: ShipmentFilters) -> list:
    """
    Translate filters into SQLAlchemy WHERE clauses.

    ``status="all"`` (or empty) disables the status filter; an unknown status
    raises ValidationError. Search is OR'd across SEARCH_COLUMNS.
    """
    conditions = []

    if filters.status and filters.status.lower() != "all":
        try:
            status = ShipmentStatus(filters.status.upper())
        except ValueError:
            raise ValidationError(f"Invalid status: {filters.status}", field="status")
        conditions.append(Shipment.status == status)

    if filters.search:
        pattern = contains_pattern(filters.search.strip())
        conditions.append(or_(*[column.ilike(pattern, escape="\\") for column in SEARCH_COLUMNS]))

    if filters.service_id and filters.service_id.lower() != "all":
        conditions.append(Shipment.service_id == filters.service_id)

    if filters.date_from:
        conditions.append(Shipment.created_at >= filters.date_from)

    if filters.date_to:
        date_to = filters.date_to
        # A bare date means the whole day
        if date_to.time() == time.min:
            date_to = date_to.replace(hour=23, minute=59, second=59, microsecond=999999)
        conditions.append(Shipment.created_at <= date_to)

    return conditions


def filtered_query(filters: ShipmentFilters) -> Select:
    query = select(Shipment).order_by(Shipment.created_at.desc())
    conditions = build_conditions(filters)
    if conditions:
        query = query.where(and_(*conditions))
    return query


async def list_shipments(
    db: AsyncSession, filters: ShipmentFilters, page: int = 1, limit: int = 10
) -> Tuple[List[Shipment], Pagination]:
    """One page of matching shipments, newest first."""
    conditions = build_conditions(filters)

    count_query = select(func.count(Shipment.id))
    if conditions:
        count_query = count_query.where(and_(*conditions))
    total = (await db.execute(count_query)).scalar() or 0

    query = filtered_query(filters).offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)
    shipments = list(result.scalars().all())

    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
    return shipments, pagination


async def all_matching(db: AsyncSession, filters: ShipmentFilters) -> List[Shipment]:
    result = await db.execute(filtered_query(filters))
    return list(result.scalars().all())
