"""Compose identity, scoped data and aggregates for the dashboard views."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import admin as admin_schemas
from ..schemas import sessions as schemas
from ..schemas.properties import PropertyOut
from . import access
from . import redirects as redirects_service
from .auth import SessionUser
from .identity import NOT_ADMIN_REASON, resolve_identity


async def establish_session(session: AsyncSession, user: SessionUser) -> schemas.SessionResponse:
    """Resolve role on login or session restore and tell the UI where to go."""

    identity = await resolve_identity(session, user)
    notice = None
    if identity.denial_reason and identity.denial_reason != NOT_ADMIN_REASON:
        notice = identity.denial_reason
    return schemas.SessionResponse(
        user_id=identity.user_id,
        email=identity.email,
        is_admin=identity.is_admin,
        destination=identity.destination,
        notice=notice,
    )


async def client_dashboard(
    session: AsyncSession,
    user: SessionUser,
    property_id: str | None = None,
) -> schemas.DashboardResponse:
    """Build the client view; an empty assignment list is a settled state."""

    identity = await resolve_identity(session, user)
    links = await redirects_service.get_redirects(session, user.user_id)
    actions = schemas.DashboardActions(
        lease_enabled=links.lease_enabled,
        report_enabled=links.report_enabled,
        lease_message=None if links.lease_enabled else schemas.LEASE_UNSET_MESSAGE,
        report_message=None if links.report_enabled else schemas.REPORT_UNSET_MESSAGE,
    )

    properties = [PropertyOut.model_validate(prop) for prop in identity.properties]
    if not properties:
        return schemas.DashboardResponse(
            user_id=identity.user_id,
            email=identity.email,
            is_admin=identity.is_admin,
            properties=[],
            actions=actions,
            message=schemas.NO_PROPERTIES_MESSAGE,
        )

    selected = property_id or access.default_selection(identity.properties)
    await access.ensure_property_access(
        session, property_id=selected, user_id=identity.user_id, is_admin=identity.is_admin
    )
    snapshot = await access.load_snapshot(session, selected)
    return schemas.DashboardResponse(
        user_id=identity.user_id,
        email=identity.email,
        is_admin=identity.is_admin,
        properties=properties,
        selected_property_id=selected,
        invoices=snapshot.invoices,
        summary=snapshot.summary,
        actions=actions,
    )


async def admin_dashboard(
    session: AsyncSession,
    property_id: str | None = None,
) -> admin_schemas.AdminDashboardResponse:
    """All properties, the selected one's invoices and its expense summary."""

    properties = await access.list_properties(session, user_id="", is_admin=True)
    selected = property_id or access.default_selection(properties)
    if selected is None:
        return admin_schemas.AdminDashboardResponse(properties=[])

    await access.ensure_property_access(session, property_id=selected, user_id="", is_admin=True)
    snapshot = await access.load_snapshot(session, selected)
    return admin_schemas.AdminDashboardResponse(
        properties=[PropertyOut.model_validate(prop) for prop in properties],
        selected_property_id=selected,
        invoices=snapshot.invoices,
        summary=snapshot.summary,
    )
