"""Invoice read helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.invoice import Invoice


async def list_for_property(session: AsyncSession, property_id: str) -> list[Invoice]:
    """Return a property's invoices, most recent invoice_date first."""

    stmt = (
        select(Invoice)
        .where(Invoice.property_id == property_id)
        .order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
