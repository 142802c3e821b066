"""Profile repository helpers."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.profile import Profile


async def get_by_id(session: AsyncSession, user_id: str) -> Profile | None:
    """Return a profile by identifier."""

    return await session.get(Profile, user_id)


async def find_by_email(session: AsyncSession, email: str) -> list[Profile]:
    """Return every profile whose email matches, ignoring case.

    Callers decide what to do with zero or multiple matches.
    """

    stmt: Select[tuple[Profile]] = select(Profile).where(func.lower(Profile.email) == email.lower()).limit(2)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_profiles(session: AsyncSession) -> list[Profile]:
    """Return all profiles ordered by email."""

    result = await session.execute(select(Profile).order_by(Profile.email.asc()))
    return list(result.scalars().all())


async def get_many(session: AsyncSession, user_ids: Iterable[str]) -> dict[str, Profile]:
    """Return profiles for the given ids keyed by id."""

    ids = list(set(user_ids))
    if not ids:
        return {}
    result = await session.execute(select(Profile).where(Profile.id.in_(ids)))
    return {profile.id: profile for profile in result.scalars().all()}
