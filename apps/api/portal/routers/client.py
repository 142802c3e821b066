"""Client dashboard endpoints and the live invoice feed."""
from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..db.session import SessionLocal, get_session
from ..models.user_redirect import RedirectType
from ..schemas import invoices as invoices_schema
from ..schemas import redirects as redirects_schema
from ..schemas import sessions as sessions_schema
from ..schemas.properties import PropertyListResponse, PropertyOut
from ..services import access
from ..services import dashboard as dashboard_service
from ..services import redirects as redirects_service
from ..services.auth import SessionUser, get_session_user, verify_token
from ..services.changes import feed
from ..services.identity import Authorized, authorize_admin

logger = logging.getLogger(__name__)

router = APIRouter()

session_factory = SessionLocal

WS_UNAUTHORIZED = 4401
WS_NOT_FOUND = 4404
WS_INTERNAL_ERROR = 1011


async def _is_admin(session: AsyncSession, user: SessionUser) -> bool:
    return isinstance(await authorize_admin(session, user), Authorized)


@router.get("/session", response_model=sessions_schema.SessionResponse)
async def get_session_info(
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> sessions_schema.SessionResponse:
    """Resolve role on sign-in or session restore."""

    return await dashboard_service.establish_session(session, user)


@router.get("/dashboard", response_model=sessions_schema.DashboardResponse)
async def get_dashboard(
    property_id: str | None = None,
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> sessions_schema.DashboardResponse:
    """Return the client dashboard for the selected (or default) property."""

    return await dashboard_service.client_dashboard(session, user, property_id)


@router.get("/properties", response_model=PropertyListResponse)
async def list_properties(
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> PropertyListResponse:
    """Return the properties visible to the caller."""

    is_admin = await _is_admin(session, user)
    properties = await access.list_properties(session, user_id=user.user_id, is_admin=is_admin)
    return PropertyListResponse(
        items=[PropertyOut.model_validate(prop) for prop in properties],
        selected_property_id=access.default_selection(properties),
    )


@router.get("/properties/{property_id}/invoices", response_model=invoices_schema.InvoiceListResponse)
async def list_invoices(
    property_id: str,
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> invoices_schema.InvoiceListResponse:
    is_admin = await _is_admin(session, user)
    await access.ensure_property_access(session, property_id=property_id, user_id=user.user_id, is_admin=is_admin)
    invoices = await access.list_invoices(session, property_id)
    return invoices_schema.InvoiceListResponse(
        property_id=property_id,
        items=[invoices_schema.InvoiceOut.model_validate(invoice) for invoice in invoices],
    )


@router.get("/properties/{property_id}/summary", response_model=invoices_schema.InvoiceSnapshot)
async def get_summary(
    property_id: str,
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> invoices_schema.InvoiceSnapshot:
    """Return invoices with monthly, category and comparison aggregates."""

    is_admin = await _is_admin(session, user)
    await access.ensure_property_access(session, property_id=property_id, user_id=user.user_id, is_admin=is_admin)
    return await access.load_snapshot(session, property_id)


@router.get("/me/redirects", response_model=redirects_schema.RedirectLinks)
async def get_my_redirects(
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> redirects_schema.RedirectLinks:
    return await redirects_service.get_redirects(session, user.user_id)


@router.get("/me/redirects/{redirect_type}", response_model=redirects_schema.RedirectTarget)
async def get_my_redirect(
    redirect_type: RedirectType,
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
) -> redirects_schema.RedirectTarget:
    """Return the link to open in a new tab, or 404 when it is not configured."""

    return await redirects_service.get_redirect_target(session, user_id=user.user_id, redirect_type=redirect_type)


@router.websocket("/properties/{property_id}/live")
async def live_invoices(websocket: WebSocket, property_id: str) -> None:
    """Push a fresh invoice snapshot whenever the property's invoices change.

    One socket holds one subscription; switching property means opening a new
    socket, and the old subscription is released when its socket closes.
    """

    await websocket.accept()

    token = websocket.query_params.get("access_token") or _bearer_from_headers(websocket)
    try:
        user = verify_token(token or "")
        async with session_factory() as session:
            is_admin = await _is_admin(session, user)
            await access.ensure_property_access(
                session, property_id=property_id, user_id=user.user_id, is_admin=is_admin
            )
    except HTTPException as exc:
        code = WS_UNAUTHORIZED if exc.status_code == status.HTTP_401_UNAUTHORIZED else WS_NOT_FOUND
        await websocket.close(code=code, reason=str(exc.detail))
        return
    except SQLAlchemyError:
        logger.exception("Access check failed for live feed on property %s", property_id)
        await websocket.close(code=WS_INTERNAL_ERROR, reason="Unable to verify access.")
        return

    async with feed.subscribe(access.INVOICES_TABLE, property_id=property_id) as subscription:
        disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
        changed: asyncio.Task | None = None
        try:
            await _send_snapshot(websocket, property_id)
            while True:
                changed = asyncio.create_task(
                    access.wait_for_change(subscription, settings.realtime_reload_interval)
                )
                done, _ = await asyncio.wait({disconnected, changed}, return_when=asyncio.FIRST_COMPLETED)
                if disconnected in done:
                    break
                await _send_snapshot(websocket, property_id)
        except WebSocketDisconnect:
            pass
        finally:
            if changed is not None:
                await _cancel(changed)
            await _cancel(disconnected)


async def _send_snapshot(websocket: WebSocket, property_id: str) -> None:
    async with session_factory() as session:
        try:
            snapshot = await access.load_snapshot(session, property_id)
        except Exception as exc:  # noqa: BLE001 - keep the socket open and the last snapshot displayed
            logger.exception("Failed to reload invoices for %s: %s", property_id, exc)
            await websocket.send_json({"type": "error", "property_id": property_id, "detail": "Failed to load invoices."})
            return
    await websocket.send_json(snapshot.model_dump(mode="json"))


async def _cancel(task: asyncio.Task) -> None:
    if task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message.get("type") == "websocket.disconnect":
            return


def _bearer_from_headers(websocket: WebSocket) -> str | None:
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value
    return None
