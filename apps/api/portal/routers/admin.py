"""Admin endpoints for properties, assignments, redirects and stats."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import admin as admin_schema
from ..schemas import redirects as redirects_schema
from ..schemas.properties import PropertyListResponse, PropertyOut, PropertyWrite
from ..services import access
from ..services import admin as admin_service
from ..services import dashboard as dashboard_service
from ..services import redirects as redirects_service
from ..services.identity import require_admin

router = APIRouter(dependencies=[Depends(require_admin)])

CONFIRMATION_REQUIRED = "Deletion must be confirmed with confirm=true."


def _require_confirmation(confirm: bool) -> None:
    if not confirm:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CONFIRMATION_REQUIRED)


@router.get("/stats", response_model=admin_schema.StatsResponse)
async def get_stats(session: AsyncSession = Depends(get_session)) -> admin_schema.StatsResponse:
    """Return table counts for the dashboard cards."""

    return await admin_service.get_stats(session)


@router.get("/dashboard", response_model=admin_schema.AdminDashboardResponse)
async def get_dashboard(
    property_id: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> admin_schema.AdminDashboardResponse:
    return await dashboard_service.admin_dashboard(session, property_id)


@router.get("/properties", response_model=PropertyListResponse)
async def list_properties(session: AsyncSession = Depends(get_session)) -> PropertyListResponse:
    properties = await access.list_properties(session, user_id="", is_admin=True)
    return PropertyListResponse(
        items=[PropertyOut.model_validate(prop) for prop in properties],
        selected_property_id=access.default_selection(properties),
    )


@router.post("/properties", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: PropertyWrite,
    session: AsyncSession = Depends(get_session),
) -> PropertyOut:
    return await admin_service.create_property(session, payload)


@router.put("/properties/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: str,
    payload: PropertyWrite,
    session: AsyncSession = Depends(get_session),
) -> PropertyOut:
    return await admin_service.update_property(session, property_id, payload)


@router.delete("/properties/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    confirm: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Delete a property along with its invoices and assignments."""

    _require_confirmation(confirm)
    await admin_service.delete_property(session, property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users", response_model=admin_schema.ProfileListResponse)
async def list_users(session: AsyncSession = Depends(get_session)) -> admin_schema.ProfileListResponse:
    return await admin_service.list_profiles(session)


@router.get("/assignments", response_model=admin_schema.AssignmentListResponse)
async def list_assignments(session: AsyncSession = Depends(get_session)) -> admin_schema.AssignmentListResponse:
    return await admin_service.list_assignments(session)


@router.post("/assignments", response_model=admin_schema.AssignmentOut, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    payload: admin_schema.AssignmentCreate,
    session: AsyncSession = Depends(get_session),
) -> admin_schema.AssignmentOut:
    """Assign a property to a user; repeating a pair answers 409."""

    return await admin_service.assign(session, payload)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: str,
    confirm: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
) -> Response:
    _require_confirmation(confirm)
    await admin_service.unassign(session, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/redirects", response_model=redirects_schema.RedirectListResponse)
async def list_redirects(
    q: str | None = Query(default=None, description="Case-insensitive email filter"),
    session: AsyncSession = Depends(get_session),
) -> redirects_schema.RedirectListResponse:
    return await redirects_service.list_redirects(session, q)


@router.put("/redirects", response_model=redirects_schema.RedirectSaved)
async def save_redirect(
    payload: redirects_schema.RedirectSetRequest,
    session: AsyncSession = Depends(get_session),
) -> redirects_schema.RedirectSaved:
    """Insert or overwrite a user's lease or report URL."""

    return await redirects_service.save_redirect(payload, session)


@router.delete("/redirects/{redirect_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_redirect(
    redirect_id: str,
    confirm: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
) -> Response:
    _require_confirmation(confirm)
    await redirects_service.delete_redirect(session, redirect_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
