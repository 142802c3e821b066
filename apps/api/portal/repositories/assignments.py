"""User-to-property assignment helpers."""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import new_id
from ..models.user_property import UserProperty


async def list_assignments(session: AsyncSession) -> list[UserProperty]:
    """Return assignments, newest first."""

    stmt = select(UserProperty).order_by(UserProperty.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def is_assigned(session: AsyncSession, *, user_id: str, property_id: str) -> bool:
    """Return True when the user may see the property."""

    stmt = select(UserProperty.id).where(
        UserProperty.user_id == user_id,
        UserProperty.property_id == property_id,
    )
    result = await session.execute(stmt)
    return result.first() is not None


async def create_assignment(session: AsyncSession, *, user_id: str, property_id: str) -> UserProperty:
    """Insert an assignment; a duplicate pair raises IntegrityError on flush."""

    assignment = UserProperty(id=new_id(), user_id=user_id, property_id=property_id)
    session.add(assignment)
    await session.flush()
    return assignment


async def delete_assignment(session: AsyncSession, assignment_id: str) -> int:
    """Remove one assignment and return the number of rows deleted."""

    result = await session.execute(delete(UserProperty).where(UserProperty.id == assignment_id))
    return result.rowcount or 0
