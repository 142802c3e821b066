"""Service-level tests for lease and report redirects."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.dialects import postgresql

from portal.models.user_redirect import RedirectType
from portal.repositories import profiles as profiles_repo
from portal.repositories import redirects as redirects_repo
from portal.repositories.redirects import RedirectRow
from portal.schemas.redirects import RedirectSetRequest
from portal.services import redirects as redirects_service


class DummySession:
    """Minimal session stub tracking commit and rollback."""

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


def test_upsert_overwrites_on_user_and_type_conflict():
    stmt = redirects_repo.build_upsert(user_id="u1", redirect_type=RedirectType.LEASE, redirect_url="https://a")
    sql = str(stmt.compile(dialect=postgresql.dialect()))

    assert "ON CONFLICT (user_id, redirect_type) DO UPDATE" in sql
    assert "redirect_url = excluded.redirect_url" in sql
    assert "RETURNING" in sql


@pytest.mark.asyncio
async def test_set_redirect_rejects_blank_url(monkeypatch):
    upsert = AsyncMock()
    monkeypatch.setattr(redirects_repo, "upsert_redirect", upsert)
    session = DummySession()

    with pytest.raises(HTTPException) as excinfo:
        await redirects_service.set_redirect(
            session, user_id="u1", redirect_type=RedirectType.LEASE, redirect_url="   "
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == redirects_service.MISSING_FIELDS_DETAIL
    upsert.assert_not_awaited()
    assert session.commits == 0


@pytest.mark.asyncio
async def test_set_redirect_unknown_user_is_404(monkeypatch):
    monkeypatch.setattr(profiles_repo, "get_by_id", AsyncMock(return_value=None))
    upsert = AsyncMock()
    monkeypatch.setattr(redirects_repo, "upsert_redirect", upsert)
    session = DummySession()

    with pytest.raises(HTTPException) as excinfo:
        await redirects_service.set_redirect(
            session, user_id="ghost", redirect_type=RedirectType.REPORT, redirect_url="https://r"
        )

    assert excinfo.value.status_code == 404
    assert session.rollbacks == 1
    upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_redirect_twice_keeps_one_logical_row(monkeypatch):
    monkeypatch.setattr(profiles_repo, "get_by_id", AsyncMock(return_value=SimpleNamespace(id="u1")))
    upsert = AsyncMock(return_value="r1")
    monkeypatch.setattr(redirects_repo, "upsert_redirect", upsert)
    session = DummySession()

    first = await redirects_service.set_redirect(
        session, user_id="u1", redirect_type=RedirectType.LEASE, redirect_url=" https://lease.example/1 "
    )
    second = await redirects_service.set_redirect(
        session, user_id="u1", redirect_type=RedirectType.LEASE, redirect_url="https://lease.example/2"
    )

    assert first.id == second.id == "r1"
    assert first.redirect_url == "https://lease.example/1"
    assert second.redirect_url == "https://lease.example/2"
    assert upsert.await_args_list[0].kwargs == {
        "user_id": "u1",
        "redirect_type": RedirectType.LEASE,
        "redirect_url": "https://lease.example/1",
    }
    assert session.commits == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("matches", [[], [SimpleNamespace(id="a"), SimpleNamespace(id="b")]])
async def test_set_redirect_by_email_requires_single_match(monkeypatch, matches):
    monkeypatch.setattr(profiles_repo, "find_by_email", AsyncMock(return_value=matches))
    monkeypatch.setattr(redirects_repo, "upsert_redirect", AsyncMock())

    with pytest.raises(HTTPException) as excinfo:
        await redirects_service.set_redirect_by_email(
            DummySession(), email="nobody@example.com", redirect_type=RedirectType.LEASE, redirect_url="https://x"
        )

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == redirects_service.EMAIL_NOT_FOUND_DETAIL


@pytest.mark.asyncio
async def test_save_redirect_dispatches_on_email(monkeypatch):
    find = AsyncMock(return_value=[SimpleNamespace(id="u2")])
    monkeypatch.setattr(profiles_repo, "find_by_email", find)
    monkeypatch.setattr(redirects_repo, "upsert_redirect", AsyncMock(return_value="r9"))
    payload = RedirectSetRequest(
        email=" Ava@Example.com ", redirect_type=RedirectType.REPORT, redirect_url="https://report"
    )

    saved = await redirects_service.save_redirect(payload, DummySession())

    assert saved.user_id == "u2"
    assert saved.redirect_type is RedirectType.REPORT
    find.assert_awaited_once()
    assert find.await_args.args[1] == "Ava@Example.com"


@pytest.mark.parametrize(
    "fields",
    [
        {"redirect_url": "https://x"},
        {"user_id": "u1", "email": "a@example.com", "redirect_url": "https://x"},
    ],
)
def test_request_needs_exactly_one_user_reference(fields):
    with pytest.raises(ValidationError):
        RedirectSetRequest(**fields)


@pytest.mark.asyncio
async def test_get_redirects_reports_unset_links(monkeypatch):
    rows = [SimpleNamespace(redirect_type=RedirectType.LEASE, redirect_url="https://lease")]
    monkeypatch.setattr(redirects_repo, "list_for_user", AsyncMock(return_value=rows))

    links = await redirects_service.get_redirects(DummySession(), "u1")

    assert links.lease == "https://lease"
    assert links.lease_enabled is True
    assert links.report is None
    assert links.report_enabled is False


@pytest.mark.asyncio
async def test_unset_redirect_target_is_404(monkeypatch):
    monkeypatch.setattr(redirects_repo, "get_for_user", AsyncMock(return_value=None))

    with pytest.raises(HTTPException) as excinfo:
        await redirects_service.get_redirect_target(DummySession(), user_id="u1", redirect_type=RedirectType.REPORT)

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == redirects_service.NO_URL_DETAIL


@pytest.mark.asyncio
async def test_list_redirects_filters_by_email_substring(monkeypatch):
    rows = [
        RedirectRow("r1", "u1", "https://a", RedirectType.LEASE, "ava@example.com", "Ava Chen"),
        RedirectRow("r2", "u2", "https://b", RedirectType.REPORT, "daniel@example.com", None),
    ]
    monkeypatch.setattr(redirects_repo, "list_with_profiles", AsyncMock(return_value=rows))

    filtered = await redirects_service.list_redirects(DummySession(), "AVA")
    everything = await redirects_service.list_redirects(DummySession(), "  ")

    assert [item.id for item in filtered.items] == ["r1"]
    assert [item.id for item in everything.items] == ["r1", "r2"]


@pytest.mark.asyncio
async def test_delete_missing_redirect_is_404(monkeypatch):
    monkeypatch.setattr(redirects_repo, "delete_redirect", AsyncMock(return_value=0))
    session = DummySession()

    with pytest.raises(HTTPException) as excinfo:
        await redirects_service.delete_redirect(session, "missing")

    assert excinfo.value.status_code == 404
    assert session.rollbacks == 1
