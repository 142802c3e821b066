"""Per-client lease and report redirect links."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import transaction
from ..models.user_redirect import RedirectType
from ..repositories import profiles as profiles_repo
from ..repositories import redirects as redirects_repo
from ..schemas import redirects as schemas

logger = logging.getLogger(__name__)

MISSING_FIELDS_DETAIL = "Please provide both user and URL."
USER_NOT_FOUND_DETAIL = "User not found"
EMAIL_NOT_FOUND_DETAIL = "User not found with that email address."
NO_URL_DETAIL = "No URL configured"


async def get_redirects(session: AsyncSession, user_id: str) -> schemas.RedirectLinks:
    """Return the caller's configured links; unset types stay None."""

    rows = await redirects_repo.list_for_user(session, user_id)
    links = schemas.RedirectLinks()
    for row in rows:
        if row.redirect_type is RedirectType.LEASE:
            links.lease = row.redirect_url
        elif row.redirect_type is RedirectType.REPORT:
            links.report = row.redirect_url
    return links


async def get_redirect_target(
    session: AsyncSession,
    *,
    user_id: str,
    redirect_type: RedirectType,
) -> schemas.RedirectTarget:
    """Return the URL to open, refusing rather than navigating to an unset link."""

    row = await redirects_repo.get_for_user(session, user_id=user_id, redirect_type=redirect_type)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_URL_DETAIL)
    return schemas.RedirectTarget(redirect_type=row.redirect_type, redirect_url=row.redirect_url)


async def set_redirect(
    session: AsyncSession,
    *,
    user_id: str,
    redirect_type: RedirectType,
    redirect_url: str,
) -> schemas.RedirectSaved:
    """Upsert the link for (user_id, redirect_type), overwriting any previous URL."""

    url = _clean_url(redirect_url)
    user_id = user_id.strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FIELDS_DETAIL)

    async with transaction(session):
        profile = await profiles_repo.get_by_id(session, user_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND_DETAIL)
        redirect_id = await redirects_repo.upsert_redirect(
            session, user_id=profile.id, redirect_type=redirect_type, redirect_url=url
        )

    logger.info("Saved %s redirect for user %s", redirect_type.value, user_id)
    return schemas.RedirectSaved(id=redirect_id, user_id=user_id, redirect_type=redirect_type, redirect_url=url)


async def set_redirect_by_email(
    session: AsyncSession,
    *,
    email: str,
    redirect_type: RedirectType,
    redirect_url: str,
) -> schemas.RedirectSaved:
    """Resolve the email to exactly one profile, then upsert its link."""

    url = _clean_url(redirect_url)
    email = email.strip()
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FIELDS_DETAIL)

    async with transaction(session):
        matches = await profiles_repo.find_by_email(session, email)
        if len(matches) != 1:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EMAIL_NOT_FOUND_DETAIL)
        user_id = matches[0].id
        redirect_id = await redirects_repo.upsert_redirect(
            session, user_id=user_id, redirect_type=redirect_type, redirect_url=url
        )

    logger.info("Saved %s redirect for %s", redirect_type.value, email)
    return schemas.RedirectSaved(id=redirect_id, user_id=user_id, redirect_type=redirect_type, redirect_url=url)


async def save_redirect(payload: schemas.RedirectSetRequest, session: AsyncSession) -> schemas.RedirectSaved:
    """Dispatch an admin save request to the id or email variant."""

    if payload.email:
        return await set_redirect_by_email(
            session, email=payload.email, redirect_type=payload.redirect_type, redirect_url=payload.redirect_url
        )
    return await set_redirect(
        session,
        user_id=payload.user_id or "",
        redirect_type=payload.redirect_type,
        redirect_url=payload.redirect_url,
    )


async def delete_redirect(session: AsyncSession, redirect_id: str) -> None:
    async with transaction(session):
        deleted = await redirects_repo.delete_redirect(session, redirect_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Redirect not found")


async def list_redirects(session: AsyncSession, search: str | None = None) -> schemas.RedirectListResponse:
    """List redirects newest first, optionally filtered by email substring."""

    rows = await redirects_repo.list_with_profiles(session)
    needle = (search or "").strip().lower()
    if needle:
        rows = [row for row in rows if needle in row.email.lower()]
    return schemas.RedirectListResponse(items=[schemas.RedirectOut.model_validate(row) for row in rows])


def _clean_url(value: str | None) -> str:
    url = (value or "").strip()
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FIELDS_DETAIL)
    return url
