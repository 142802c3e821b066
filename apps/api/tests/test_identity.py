"""Tests for role resolution and the admin guard."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from portal.repositories import profiles as profiles_repo
from portal.repositories import properties as properties_repo
from portal.repositories import roles as roles_repo
from portal.services import identity as identity_service
from portal.services.auth import SessionUser

USER = SessionUser(user_id="user-1", email="ava@example.com")


def make_session() -> AsyncMock:
    return AsyncMock()


@pytest.mark.asyncio
async def test_admin_role_row_authorizes(monkeypatch):
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=SimpleNamespace(role="admin")))

    result = await identity_service.authorize_admin(make_session(), USER)

    assert result == identity_service.Authorized(USER)


@pytest.mark.asyncio
async def test_missing_role_row_is_a_plain_denial(monkeypatch):
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=None))

    result = await identity_service.authorize_admin(make_session(), USER)

    assert result == identity_service.Denied(identity_service.NOT_ADMIN_REASON)


@pytest.mark.asyncio
async def test_failed_role_lookup_denies_and_rolls_back(monkeypatch):
    monkeypatch.setattr(
        roles_repo,
        "find_role",
        AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("connection reset"))),
    )
    session = make_session()

    result = await identity_service.authorize_admin(session, USER)

    assert result == identity_service.Denied(identity_service.LOOKUP_FAILED_REASON)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_client_identity_sees_assigned_properties(monkeypatch):
    assigned = [SimpleNamespace(id="p1", name="Maple Court Duplex", address=None)]
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=None))
    monkeypatch.setattr(properties_repo, "list_for_user", AsyncMock(return_value=assigned))
    list_all = AsyncMock(return_value=[])
    monkeypatch.setattr(properties_repo, "list_all", list_all)

    result = await identity_service.resolve_identity(make_session(), USER)

    assert result.is_admin is False
    assert result.properties == assigned
    assert result.destination == identity_service.CLIENT_DESTINATION
    assert result.denial_reason == identity_service.NOT_ADMIN_REASON
    list_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_admin_identity_sees_every_property(monkeypatch):
    everything = [SimpleNamespace(id="p1", name="A"), SimpleNamespace(id="p2", name="B")]
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=SimpleNamespace(role="admin")))
    monkeypatch.setattr(properties_repo, "list_all", AsyncMock(return_value=everything))

    result = await identity_service.resolve_identity(make_session(), USER)

    assert result.is_admin is True
    assert result.properties == everything
    assert result.destination == identity_service.ADMIN_DESTINATION
    assert result.denial_reason is None


@pytest.mark.asyncio
async def test_email_falls_back_to_profile(monkeypatch):
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=None))
    monkeypatch.setattr(properties_repo, "list_for_user", AsyncMock(return_value=[]))
    monkeypatch.setattr(profiles_repo, "get_by_id", AsyncMock(return_value=SimpleNamespace(email="daniel@example.com")))

    result = await identity_service.resolve_identity(make_session(), SessionUser(user_id="user-3"))

    assert result.email == "daniel@example.com"
    assert result.properties == []


@pytest.mark.asyncio
async def test_require_admin_forbids_clients(monkeypatch):
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=None))

    with pytest.raises(HTTPException) as excinfo:
        await identity_service.require_admin(user=USER, session=make_session())

    assert excinfo.value.status_code == 403
    assert excinfo.value.detail == identity_service.NOT_ADMIN_REASON


@pytest.mark.asyncio
async def test_require_admin_returns_user(monkeypatch):
    monkeypatch.setattr(roles_repo, "find_role", AsyncMock(return_value=SimpleNamespace(role="admin")))

    assert await identity_service.require_admin(user=USER, session=make_session()) == USER
