"""Tests for scoped property access and the dashboard views."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from portal.repositories import assignments as assignments_repo
from portal.repositories import invoices as invoices_repo
from portal.repositories import properties as properties_repo
from portal.schemas import redirects as redirects_schema
from portal.schemas import sessions as sessions_schema
from portal.services import access
from portal.services import dashboard as dashboard_service
from portal.services import redirects as redirects_service
from portal.services.auth import SessionUser
from portal.services.identity import LOOKUP_FAILED_REASON, Identity

USER = SessionUser(user_id="u1", email="ava@example.com")

MAPLE = SimpleNamespace(id="p-maple", name="Maple Court Duplex", address="12 Maple Ct")
HARBOR = SimpleNamespace(id="p-harbor", name="Harbor View Loft", address=None)

INVOICES = [
    SimpleNamespace(
        id="i1", property_id="p-maple", amount=Decimal("50.00"), category="Maintenance",
        vendor="FixIt", invoice_date=date(2024, 2, 10),
    ),
    SimpleNamespace(
        id="i2", property_id="p-maple", amount=Decimal("75.00"), category="Utilities",
        vendor="City Power", invoice_date=date(2024, 1, 20),
    ),
    SimpleNamespace(
        id="i3", property_id="p-maple", amount=Decimal("100.00"), category="Maintenance",
        vendor="FixIt", invoice_date=date(2024, 1, 15),
    ),
]


def test_default_selection_is_first_by_name():
    assert access.default_selection([MAPLE, HARBOR]) == "p-harbor"
    assert access.default_selection([]) is None


@pytest.mark.asyncio
async def test_unassigned_property_is_hidden_from_clients(monkeypatch):
    monkeypatch.setattr(properties_repo, "get_by_id", AsyncMock(return_value=MAPLE))
    monkeypatch.setattr(assignments_repo, "is_assigned", AsyncMock(return_value=False))

    with pytest.raises(HTTPException) as excinfo:
        await access.ensure_property_access(AsyncMock(), property_id="p-maple", user_id="u3", is_admin=False)

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_admin_skips_assignment_check(monkeypatch):
    monkeypatch.setattr(properties_repo, "get_by_id", AsyncMock(return_value=MAPLE))
    is_assigned = AsyncMock(return_value=False)
    monkeypatch.setattr(assignments_repo, "is_assigned", is_assigned)

    prop = await access.ensure_property_access(AsyncMock(), property_id="p-maple", user_id="admin", is_admin=True)

    assert prop is MAPLE
    is_assigned.assert_not_awaited()


@pytest.mark.asyncio
async def test_snapshot_carries_invoices_and_summary(monkeypatch):
    monkeypatch.setattr(invoices_repo, "list_for_property", AsyncMock(return_value=INVOICES))

    snapshot = await access.load_snapshot(AsyncMock(), "p-maple")

    assert snapshot.type == "snapshot"
    assert [invoice.id for invoice in snapshot.invoices] == ["i1", "i2", "i3"]
    assert snapshot.summary.grand_total == 225.0
    assert [(m.month, m.total) for m in snapshot.summary.monthly] == [("2024-01", 175.0), ("2024-02", 50.0)]


def test_empty_snapshot_has_zero_totals():
    snapshot = access.build_snapshot("p-harbor", [])

    assert snapshot.invoices == []
    assert snapshot.summary.grand_total == 0
    assert snapshot.summary.monthly == []


@pytest.mark.asyncio
async def test_client_without_properties_gets_settled_empty_state(monkeypatch):
    identity = Identity(user_id="u1", email="ava@example.com", is_admin=False, properties=[])
    monkeypatch.setattr(dashboard_service, "resolve_identity", AsyncMock(return_value=identity))
    monkeypatch.setattr(redirects_service, "get_redirects", AsyncMock(return_value=redirects_schema.RedirectLinks()))
    load = AsyncMock()
    monkeypatch.setattr(access, "load_snapshot", load)

    result = await dashboard_service.client_dashboard(AsyncMock(), USER)

    assert result.properties == []
    assert result.message == sessions_schema.NO_PROPERTIES_MESSAGE
    assert result.actions.lease_enabled is False
    assert result.actions.lease_message == sessions_schema.LEASE_UNSET_MESSAGE
    load.assert_not_awaited()


@pytest.mark.asyncio
async def test_client_dashboard_selects_first_property(monkeypatch):
    identity = Identity(user_id="u1", email="ava@example.com", is_admin=False, properties=[MAPLE, HARBOR])
    monkeypatch.setattr(dashboard_service, "resolve_identity", AsyncMock(return_value=identity))
    monkeypatch.setattr(
        redirects_service,
        "get_redirects",
        AsyncMock(return_value=redirects_schema.RedirectLinks(lease="https://lease")),
    )
    monkeypatch.setattr(access, "ensure_property_access", AsyncMock(return_value=HARBOR))
    monkeypatch.setattr(access, "load_snapshot", AsyncMock(return_value=access.build_snapshot("p-harbor", [])))

    result = await dashboard_service.client_dashboard(AsyncMock(), USER)

    assert result.selected_property_id == "p-harbor"
    assert result.actions.lease_enabled is True
    assert result.actions.report_enabled is False
    assert result.message is None


@pytest.mark.asyncio
async def test_session_surfaces_lookup_failures(monkeypatch):
    identity = Identity(
        user_id="u1", email="ava@example.com", is_admin=False, denial_reason=LOOKUP_FAILED_REASON
    )
    monkeypatch.setattr(dashboard_service, "resolve_identity", AsyncMock(return_value=identity))

    result = await dashboard_service.establish_session(AsyncMock(), USER)

    assert result.destination == "/dashboard"
    assert result.notice == LOOKUP_FAILED_REASON


@pytest.mark.asyncio
async def test_admin_dashboard_without_properties(monkeypatch):
    monkeypatch.setattr(properties_repo, "list_all", AsyncMock(return_value=[]))

    result = await dashboard_service.admin_dashboard(AsyncMock())

    assert result.properties == []
    assert result.selected_property_id is None
