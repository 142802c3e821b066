"""Scoped reads of properties and invoices, and live reload helpers."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.invoice import Invoice
from ..models.property import Property
from ..repositories import assignments as assignments_repo
from ..repositories import invoices as invoices_repo
from ..repositories import properties as properties_repo
from ..schemas import invoices as schemas
from . import expenses
from .changes import Subscription

INVOICES_TABLE = "invoices"


async def list_properties(session: AsyncSession, *, user_id: str, is_admin: bool) -> list[Property]:
    """Admins see every property; clients only their assignments. Name ascending."""

    if is_admin:
        return await properties_repo.list_all(session)
    return await properties_repo.list_for_user(session, user_id)


def default_selection(properties: Sequence[Property]) -> str | None:
    """Return the id of the first property by name, or None for an empty list."""

    if not properties:
        return None
    first = min(properties, key=lambda prop: (prop.name, prop.id))
    return first.id


async def ensure_property_access(
    session: AsyncSession,
    *,
    property_id: str,
    user_id: str,
    is_admin: bool,
) -> Property:
    """Return the property if the caller may see it, else 404 without leaking existence."""

    prop = await properties_repo.get_by_id(session, property_id)
    if prop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    if not is_admin and not await assignments_repo.is_assigned(session, user_id=user_id, property_id=property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return prop


async def list_invoices(session: AsyncSession, property_id: str) -> list[Invoice]:
    """Return invoices for one property, newest invoice_date first."""

    return await invoices_repo.list_for_property(session, property_id)


def build_snapshot(property_id: str, invoices: Sequence[Invoice]) -> schemas.InvoiceSnapshot:
    summary = expenses.summarize(invoices)
    return schemas.InvoiceSnapshot(
        property_id=property_id,
        invoices=[schemas.InvoiceOut.model_validate(invoice) for invoice in invoices],
        summary=schemas.ExpenseSummaryOut.model_validate(summary),
    )


async def load_snapshot(session: AsyncSession, property_id: str) -> schemas.InvoiceSnapshot:
    """Re-read the full invoice list; live views call this on every change."""

    invoices = await list_invoices(session, property_id)
    return build_snapshot(property_id, invoices)


async def wait_for_change(subscription: Subscription, coalesce_seconds: float) -> int:
    """Block until an event arrives, then fold any burst into a single reload.

    Returns the number of events consumed.
    """

    await subscription.get()
    if coalesce_seconds > 0:
        await asyncio.sleep(coalesce_seconds)
    return 1 + subscription.drain()
