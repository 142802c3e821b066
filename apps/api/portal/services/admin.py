"""Admin-side management of properties, assignments and dashboard stats."""
from __future__ import annotations

import asyncio
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import SessionLocal, transaction
from ..repositories import assignments as assignments_repo
from ..repositories import profiles as profiles_repo
from ..repositories import properties as properties_repo
from ..repositories import stats as stats_repo
from ..schemas import admin as schemas
from ..schemas.properties import PropertyOut, PropertyWrite
from .access import INVOICES_TABLE
from .changes import ChangeEvent, ChangeFeed, ChangeType, feed

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
DUPLICATE_ASSIGNMENT_DETAIL = "This user is already assigned to this property."
PROPERTY_NAME_REQUIRED = "Property name is required."

session_factory = SessionLocal


def sqlstate_of(exc: IntegrityError) -> str | None:
    """Return the SQLSTATE carried by a driver error, if any."""

    candidates = [exc.orig, getattr(exc.orig, "__cause__", None)]
    for candidate in candidates:
        if candidate is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            code = getattr(candidate, attr, None)
            if code:
                return str(code)
    return None


async def create_property(session: AsyncSession, payload: PropertyWrite) -> PropertyOut:
    name = _require_name(payload.name)
    async with transaction(session):
        prop = await properties_repo.create_property(session, name=name, address=_clean_optional(payload.address))
    return PropertyOut.model_validate(prop)


async def update_property(session: AsyncSession, property_id: str, payload: PropertyWrite) -> PropertyOut:
    name = _require_name(payload.name)
    async with transaction(session):
        prop = await properties_repo.get_by_id(session, property_id)
        if prop is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        prop.name = name
        prop.address = _clean_optional(payload.address)
        session.add(prop)
    return PropertyOut.model_validate(prop)


async def delete_property(session: AsyncSession, property_id: str, change_feed: ChangeFeed = feed) -> None:
    """Delete a property together with its assignments and invoices."""

    async with transaction(session):
        deleted = await properties_repo.delete_property(session, property_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    logger.info("Deleted property %s", property_id)
    # Cascaded invoice rows do not fire row triggers on every backend, so tell live views directly.
    await change_feed.publish(
        ChangeEvent(table=INVOICES_TABLE, type=ChangeType.DELETE, old_record={"property_id": property_id})
    )


async def list_profiles(session: AsyncSession) -> schemas.ProfileListResponse:
    profiles = await profiles_repo.list_profiles(session)
    return schemas.ProfileListResponse(items=[schemas.ProfileOut.model_validate(p) for p in profiles])


async def list_assignments(session: AsyncSession) -> schemas.AssignmentListResponse:
    """Return assignments newest first, enriched with profile and property details."""

    rows = await assignments_repo.list_assignments(session)
    # An AsyncSession runs one statement at a time, so each lookup gets its own.
    async with session_factory() as profile_session, session_factory() as property_session:
        profiles, properties = await asyncio.gather(
            profiles_repo.get_many(profile_session, [row.user_id for row in rows]),
            properties_repo.get_many(property_session, [row.property_id for row in rows]),
        )

    items = []
    for row in rows:
        profile = profiles.get(row.user_id)
        prop = properties.get(row.property_id)
        items.append(
            schemas.AssignmentOut(
                id=row.id,
                user_id=row.user_id,
                property_id=row.property_id,
                email=profile.email if profile else "",
                full_name=profile.full_name if profile else None,
                property_name=prop.name if prop else "",
                property_address=prop.address if prop else None,
            )
        )
    return schemas.AssignmentListResponse(items=items)


async def assign(session: AsyncSession, payload: schemas.AssignmentCreate) -> schemas.AssignmentOut:
    """Link a user to a property; a repeated pair is a 409, not a second row."""

    user_id = payload.user_id.strip()
    property_id = payload.property_id.strip()
    if not user_id or not property_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please select both user and property.")

    try:
        async with transaction(session):
            assignment = await assignments_repo.create_assignment(session, user_id=user_id, property_id=property_id)
    except IntegrityError as exc:
        if sqlstate_of(exc) == UNIQUE_VIOLATION:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_ASSIGNMENT_DETAIL) from exc
        logger.warning("Assignment of %s to %s rejected: %s", user_id, property_id, exc.orig)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown user or property.") from exc

    logger.info("Assigned property %s to user %s", property_id, user_id)
    return schemas.AssignmentOut(id=assignment.id, user_id=user_id, property_id=property_id)


async def unassign(session: AsyncSession, assignment_id: str) -> None:
    async with transaction(session):
        deleted = await assignments_repo.delete_assignment(session, assignment_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")


async def get_stats(session: AsyncSession) -> schemas.StatsResponse:
    counts = await stats_repo.count_rows(session)
    return schemas.StatsResponse(**counts)


def _require_name(value: str | None) -> str:
    name = (value or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PROPERTY_NAME_REQUIRED)
    return name


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
