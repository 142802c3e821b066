"""Bridge Postgres NOTIFY payloads into the change feed."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import asyncpg

from .changes import ChangeEvent, ChangeFeed, ChangeType

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Raised when a notification payload cannot be turned into a change event."""


def parse_payload(payload: str) -> ChangeEvent:
    """Decode the JSON emitted by the row-change trigger.

    Expected shape: ``{"table": ..., "type": "INSERT|UPDATE|DELETE",
    "record": {...} | null, "old_record": {...} | null}``.
    """

    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"Invalid JSON payload: {exc}") from exc
    if not isinstance(data, dict):
        raise PayloadError("Payload must be a JSON object")

    table = data.get("table")
    if not isinstance(table, str) or not table:
        raise PayloadError("Payload is missing the table name")

    try:
        change_type = ChangeType(str(data.get("type", "")).upper())
    except ValueError as exc:
        raise PayloadError(f"Unknown change type: {data.get('type')!r}") from exc

    record = data.get("record") or {}
    old_record = data.get("old_record") or {}
    if not isinstance(record, dict) or not isinstance(old_record, dict):
        raise PayloadError("Row images must be JSON objects")

    return ChangeEvent(table=table, type=change_type, record=record, old_record=old_record)


class PostgresChangeListener:
    """Hold one LISTEN connection and republish its notifications."""

    def __init__(self, dsn: str, channel: str, change_feed: ChangeFeed, *, ssl: bool = False) -> None:
        self._dsn = dsn
        self._channel = channel
        self._feed = change_feed
        self._ssl = ssl
        self._connection: asyncpg.Connection | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._connection is not None and not self._connection.is_closed()

    async def start(self) -> None:
        if self.running:
            return
        connect_kwargs: dict[str, Any] = {}
        if self._ssl:
            connect_kwargs["ssl"] = True
        self._connection = await asyncpg.connect(self._dsn, **connect_kwargs)
        await self._connection.add_listener(self._channel, self._on_notify)
        logger.info("Listening for row changes on channel %s", self._channel)

    async def stop(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.remove_listener(self._channel, self._on_notify)
        finally:
            await connection.close()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Stopped listening on channel %s", self._channel)

    def _on_notify(self, connection: Any, pid: int, channel: str, payload: str) -> None:
        try:
            event = parse_payload(payload)
        except PayloadError as exc:
            logger.warning("Skipping notification on %s: %s", channel, exc)
            return
        task = asyncio.get_running_loop().create_task(self._feed.publish(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
