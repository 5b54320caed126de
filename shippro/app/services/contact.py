"""
Contact form intake.
"""

import logging
import math
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.models.contact_form import ContactForm
from shippro.app.schemas.contact import ContactFormCreate
from shippro.app.schemas.shipment import Pagination

logger = logging.getLogger("shippro.contact")


async def submit_contact_form(db: AsyncSession, data: ContactFormCreate) -> ContactForm:
    form = ContactForm(
        name=data.name,
        email=data.email,
        phone=data.phone,
        company=data.company,
        service_type=data.service_type,
        message=data.message,
        status="NEW",
    )
    db.add(form)
    await db.commit()
    await db.refresh(form)
    logger.info(f"Contact form {form.id} received from {form.email}")
    return form


async def list_contact_forms(db: AsyncSession, page: int = 1, limit: int = 20) -> Tuple[List[ContactForm], Pagination]:
    """Newest first."""
    total = (await db.execute(select(func.count(ContactForm.id)))).scalar() or 0
    result = await db.execute(
        select(ContactForm)
        .order_by(ContactForm.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    pagination = Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
    return list(result.scalars().all()), pagination
