"""Tests for the in-memory change feed."""
from __future__ import annotations

import pytest

from portal.services import access
from portal.services.changes import ChangeEvent, ChangeFeed, ChangeType


def invoice_event(change_type=ChangeType.INSERT, **images):
    return ChangeEvent(table="invoices", type=change_type, **images)


@pytest.mark.asyncio
async def test_publish_reaches_only_matching_filters():
    feed = ChangeFeed(queue_size=4)

    async with feed.subscribe("invoices", property_id="p1") as first:
        async with feed.subscribe("invoices", property_id="p2") as second:
            delivered = await feed.publish(invoice_event(record={"property_id": "p1", "amount": "10"}))

            assert delivered == 1
            assert first.pending() == 1
            assert second.pending() == 0


@pytest.mark.asyncio
async def test_delete_matches_on_old_record():
    feed = ChangeFeed()

    async with feed.subscribe("invoices", property_id="p1") as subscription:
        await feed.publish(invoice_event(ChangeType.DELETE, old_record={"property_id": "p1"}))
        event = await subscription.get()

    assert event.type is ChangeType.DELETE


@pytest.mark.asyncio
async def test_other_tables_are_not_delivered():
    feed = ChangeFeed()

    async with feed.subscribe("invoices", property_id="p1") as subscription:
        delivered = await feed.publish(ChangeEvent(table="properties", type=ChangeType.UPDATE, record={"id": "p1"}))

        assert delivered == 0
        assert subscription.pending() == 0


@pytest.mark.asyncio
async def test_subscription_released_on_exit_and_on_error():
    feed = ChangeFeed()

    async with feed.subscribe("invoices", property_id="p1"):
        assert await feed.subscriber_count("invoices") == 1
    assert await feed.subscriber_count() == 0

    with pytest.raises(RuntimeError):
        async with feed.subscribe("invoices", property_id="p1"):
            raise RuntimeError("view torn down")
    assert await feed.subscriber_count() == 0
    assert await feed.publish(invoice_event(record={"property_id": "p1"})) == 0


@pytest.mark.asyncio
async def test_full_buffer_drops_oldest_event():
    feed = ChangeFeed(queue_size=2)

    async with feed.subscribe("invoices") as subscription:
        for amount in ("1", "2", "3"):
            await feed.publish(invoice_event(record={"property_id": "p1", "amount": amount}))

        assert subscription.pending() == 2
        assert subscription.dropped == 1
        first = await subscription.get()
        assert first.record["amount"] == "2"


@pytest.mark.asyncio
async def test_wait_for_change_coalesces_a_burst():
    feed = ChangeFeed()

    async with feed.subscribe("invoices", property_id="p1") as subscription:
        for _ in range(3):
            await feed.publish(invoice_event(ChangeType.UPDATE, record={"property_id": "p1"}))

        consumed = await access.wait_for_change(subscription, 0.01)

        assert consumed == 3
        assert subscription.pending() == 0
