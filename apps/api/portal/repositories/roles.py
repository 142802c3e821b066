"""Role lookups."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user_role import AppRole, UserRole


async def find_role(session: AsyncSession, *, user_id: str, role: AppRole) -> UserRole | None:
    """Return the matching role row, or None when the user lacks the role."""

    stmt = select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
