"""Redirect URL persistence helpers."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import new_id, utcnow
from ..models.profile import Profile
from ..models.user_redirect import RedirectType, UserRedirect


@dataclass(slots=True)
class RedirectRow:
    """Redirect joined with the owning profile, as shown in the admin listing."""

    id: str
    user_id: str
    redirect_url: str
    redirect_type: RedirectType
    email: str
    full_name: str | None


async def list_for_user(session: AsyncSession, user_id: str) -> list[UserRedirect]:
    """Return every redirect configured for a user."""

    stmt = select(UserRedirect).where(UserRedirect.user_id == user_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_for_user(session: AsyncSession, *, user_id: str, redirect_type: RedirectType) -> UserRedirect | None:
    """Return the redirect of one type for a user, or None when unset."""

    stmt = select(UserRedirect).where(
        UserRedirect.user_id == user_id,
        UserRedirect.redirect_type == redirect_type,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_with_profiles(session: AsyncSession) -> list[RedirectRow]:
    """Return all redirects with profile details, newest first."""

    stmt = (
        select(UserRedirect, Profile)
        .join(Profile, UserRedirect.user_id == Profile.id)
        .order_by(UserRedirect.created_at.desc())
    )
    rows = (await session.execute(stmt)).all()
    return [
        RedirectRow(
            id=redirect.id,
            user_id=redirect.user_id,
            redirect_url=redirect.redirect_url,
            redirect_type=redirect.redirect_type,
            email=profile.email,
            full_name=profile.full_name,
        )
        for redirect, profile in rows
    ]


def build_upsert(*, user_id: str, redirect_type: RedirectType, redirect_url: str) -> Insert:
    """Build the insert-or-overwrite statement keyed on (user_id, redirect_type)."""

    now = utcnow()
    stmt = insert(UserRedirect).values(
        id=new_id(),
        user_id=user_id,
        redirect_type=redirect_type,
        redirect_url=redirect_url,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=[UserRedirect.user_id, UserRedirect.redirect_type],
        set_={"redirect_url": stmt.excluded.redirect_url, "updated_at": stmt.excluded.updated_at},
    ).returning(UserRedirect.id)


async def upsert_redirect(
    session: AsyncSession,
    *,
    user_id: str,
    redirect_type: RedirectType,
    redirect_url: str,
) -> str:
    """Insert or overwrite the redirect and return the surviving row id."""

    stmt = build_upsert(user_id=user_id, redirect_type=redirect_type, redirect_url=redirect_url)
    result = await session.execute(stmt)
    return result.scalar_one()


async def delete_redirect(session: AsyncSession, redirect_id: str) -> int:
    """Remove one redirect and return the number of rows deleted."""

    result = await session.execute(delete(UserRedirect).where(UserRedirect.id == redirect_id))
    return result.rowcount or 0
