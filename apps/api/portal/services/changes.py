"""In-memory row-change feed for live dashboard views."""
from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict
from uuid import uuid4

from ..core.config import settings

logger = logging.getLogger(__name__)


class ChangeType(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(slots=True)
class ChangeEvent:
    """A single row change on a table."""

    table: str
    type: ChangeType
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)

    def matches(self, filters: dict[str, Any]) -> bool:
        """Return True if either row image satisfies every equality filter."""

        if not filters:
            return True
        for image in (self.record, self.old_record):
            if image and all(str(image.get(key)) == str(value) for key, value in filters.items()):
                return True
        return False


class Subscription:
    """Buffered stream of change events for one table and equality filter."""

    def __init__(self, table: str, filters: dict[str, Any], maxsize: int) -> None:
        self.subscription_id = str(uuid4())
        self.table = table
        self.filters = dict(filters)
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, event: ChangeEvent) -> None:
        """Enqueue an event, discarding the oldest one when the buffer is full."""

        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(event)

    async def get(self) -> ChangeEvent:
        return await self._queue.get()

    def drain(self) -> int:
        """Discard buffered events and return how many were pending."""

        count = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            count += 1
        return count

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.get()


class ChangeFeed:
    """Fan change events out to subscriptions keyed by table and filters."""

    def __init__(self, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._subscriptions: Dict[str, Dict[str, Subscription]] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def subscribe(self, table: str, **filters: Any) -> AsyncIterator[Subscription]:
        """Hold a subscription for the duration of the ``async with`` block."""

        subscription = Subscription(table, filters, self._queue_size)
        async with self._lock:
            self._subscriptions.setdefault(table, {})[subscription.subscription_id] = subscription
        logger.debug("Opened subscription %s on %s %s", subscription.subscription_id, table, filters)
        try:
            yield subscription
        finally:
            await self._release(subscription)

    async def _release(self, subscription: Subscription) -> None:
        async with self._lock:
            subscribers = self._subscriptions.get(subscription.table)
            if subscribers is not None:
                subscribers.pop(subscription.subscription_id, None)
                if not subscribers:
                    self._subscriptions.pop(subscription.table, None)
        logger.debug("Released subscription %s", subscription.subscription_id)

    async def publish(self, event: ChangeEvent) -> int:
        """Deliver an event to every matching subscription and return how many received it."""

        async with self._lock:
            subscribers = list(self._subscriptions.get(event.table, {}).values())

        delivered = 0
        for subscription in subscribers:
            if event.matches(subscription.filters):
                subscription.offer(event)
                delivered += 1
        return delivered

    async def subscriber_count(self, table: str | None = None) -> int:
        async with self._lock:
            if table is not None:
                return len(self._subscriptions.get(table, {}))
            return sum(len(subs) for subs in self._subscriptions.values())


feed = ChangeFeed(queue_size=settings.realtime_queue_size)
