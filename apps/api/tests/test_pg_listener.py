"""Tests for the Postgres notification bridge."""
from __future__ import annotations

import asyncio
import json

import pytest

from portal.services.changes import ChangeFeed, ChangeType
from portal.services.pg_listener import PayloadError, PostgresChangeListener, parse_payload


def test_parse_payload_builds_event():
    payload = json.dumps(
        {
            "table": "invoices",
            "type": "update",
            "record": {"id": "inv-1", "property_id": "p1"},
            "old_record": {"id": "inv-1", "property_id": "p1"},
        }
    )

    event = parse_payload(payload)

    assert event.table == "invoices"
    assert event.type is ChangeType.UPDATE
    assert event.record["property_id"] == "p1"


def test_parse_payload_treats_null_images_as_empty():
    event = parse_payload(json.dumps({"table": "invoices", "type": "DELETE", "record": None, "old_record": {"property_id": "p1"}}))

    assert event.record == {}
    assert event.old_record == {"property_id": "p1"}


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps(["invoices"]),
        json.dumps({"type": "INSERT"}),
        json.dumps({"table": "invoices", "type": "TRUNCATE"}),
        json.dumps({"table": "invoices", "type": "INSERT", "record": "oops"}),
    ],
)
def test_parse_payload_rejects_malformed(payload):
    with pytest.raises(PayloadError):
        parse_payload(payload)


@pytest.mark.asyncio
async def test_notification_is_republished_on_feed():
    feed = ChangeFeed()
    listener = PostgresChangeListener("postgresql://unused", "table_changes", feed)
    payload = json.dumps({"table": "invoices", "type": "INSERT", "record": {"property_id": "p1"}})

    async with feed.subscribe("invoices", property_id="p1") as subscription:
        listener._on_notify(None, 1, "table_changes", payload)
        event = await asyncio.wait_for(subscription.get(), timeout=1)

    assert event.type is ChangeType.INSERT


@pytest.mark.asyncio
async def test_malformed_notification_is_skipped():
    feed = ChangeFeed()
    listener = PostgresChangeListener("postgresql://unused", "table_changes", feed)

    async with feed.subscribe("invoices") as subscription:
        listener._on_notify(None, 1, "table_changes", "{")
        await asyncio.sleep(0)

        assert subscription.pending() == 0
    assert not listener.running
