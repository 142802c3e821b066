"""Role resolution and the admin authorization guard."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.property import Property
from ..models.user_role import AppRole
from ..repositories import profiles as profiles_repo
from ..repositories import roles as roles_repo
from . import access
from .auth import SessionUser, get_session_user

logger = logging.getLogger(__name__)

ADMIN_DESTINATION = "/admin"
CLIENT_DESTINATION = "/dashboard"

NOT_ADMIN_REASON = "You don't have admin privileges."
LOOKUP_FAILED_REASON = "Unable to verify admin privileges."


@dataclass(frozen=True, slots=True)
class Authorized:
    user: SessionUser


@dataclass(frozen=True, slots=True)
class Denied:
    reason: str


AuthorizationResult = Union[Authorized, Denied]


@dataclass(slots=True)
class Identity:
    """Who the caller is and which properties they may see."""

    user_id: str
    email: str | None
    is_admin: bool
    properties: list[Property] = field(default_factory=list)
    denial_reason: str | None = None

    @property
    def destination(self) -> str:
        return ADMIN_DESTINATION if self.is_admin else CLIENT_DESTINATION


async def check_admin(session: AsyncSession, user_id: str) -> bool:
    """Return True when an admin role row exists; a missing row is not an error."""

    role = await roles_repo.find_role(session, user_id=user_id, role=AppRole.ADMIN)
    return role is not None


async def authorize_admin(session: AsyncSession, user: SessionUser) -> AuthorizationResult:
    """Turn the role lookup into an explicit authorization result."""

    try:
        is_admin = await check_admin(session, user.user_id)
    except SQLAlchemyError:
        logger.exception("Admin role lookup failed for user %s", user.user_id)
        await session.rollback()
        return Denied(LOOKUP_FAILED_REASON)
    if is_admin:
        return Authorized(user)
    return Denied(NOT_ADMIN_REASON)


async def resolve_identity(session: AsyncSession, user: SessionUser) -> Identity:
    """Derive role and visible properties for a freshly established session."""

    authorization = await authorize_admin(session, user)
    is_admin = isinstance(authorization, Authorized)

    email = user.email
    if email is None:
        profile = await profiles_repo.get_by_id(session, user.user_id)
        email = profile.email if profile is not None else None

    properties = await access.list_properties(session, user_id=user.user_id, is_admin=is_admin)

    return Identity(
        user_id=user.user_id,
        email=email,
        is_admin=is_admin,
        properties=properties,
        denial_reason=authorization.reason if isinstance(authorization, Denied) else None,
    )


async def require_admin(
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> SessionUser:
    """Dependency shared by every admin route."""

    result = await authorize_admin(session, user)
    if isinstance(result, Denied):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=result.reason)
    return result.user
