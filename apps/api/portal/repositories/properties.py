"""Property persistence helpers."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import new_id
from ..models.property import Property
from ..models.user_property import UserProperty


async def get_by_id(session: AsyncSession, property_id: str) -> Property | None:
    """Return a property by identifier."""

    return await session.get(Property, property_id)


async def list_all(session: AsyncSession) -> list[Property]:
    """Return every property ordered by name."""

    result = await session.execute(select(Property).order_by(Property.name.asc(), Property.id.asc()))
    return list(result.scalars().all())


async def list_for_user(session: AsyncSession, user_id: str) -> list[Property]:
    """Return the properties assigned to a user, joined through user_properties."""

    stmt = (
        select(Property)
        .join(UserProperty, UserProperty.property_id == Property.id)
        .where(UserProperty.user_id == user_id)
        .order_by(Property.name.asc(), Property.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_many(session: AsyncSession, property_ids: Iterable[str]) -> dict[str, Property]:
    """Return properties for the given ids keyed by id."""

    ids = list(set(property_ids))
    if not ids:
        return {}
    result = await session.execute(select(Property).where(Property.id.in_(ids)))
    return {prop.id: prop for prop in result.scalars().all()}


async def create_property(session: AsyncSession, *, name: str, address: str | None) -> Property:
    """Persist a new property and return it."""

    prop = Property(id=new_id(), name=name, address=address)
    session.add(prop)
    await session.flush()
    return prop


async def delete_property(session: AsyncSession, property_id: str) -> int:
    """Delete a property; assignments and invoices go with it via ON DELETE CASCADE."""

    result = await session.execute(delete(Property).where(Property.id == property_id))
    return result.rowcount or 0
