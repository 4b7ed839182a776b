"""Push-style change notifications for the habit tables.

ORM writes to ``habits`` and ``habit_logs`` are collected per session and
published once the transaction commits. Subscribers receive
``ChangeEvent(table, event_type, user_id)`` on an ``asyncio.Queue`` owned by
their event loop, so publishing is safe from any thread.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import event
from sqlalchemy.orm import Session, object_session

from app.models import Habit, HabitLog

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

_PENDING_KEY = "pending_change_events"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    user_id: str


class ChangeSubscription:
    def __init__(self, feed: "ChangeFeed", user_id: str, loop: asyncio.AbstractEventLoop) -> None:
        self.user_id = user_id
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._feed = feed
        self._loop = loop
        self.closed = False

    def deliver(self, change: ChangeEvent) -> bool:
        if self.closed:
            return False
        try:
            self._loop.call_soon_threadsafe(self.queue.put_nowait, change)
        except RuntimeError:
            # loop already closed
            self.closed = True
            return False
        return True

    async def get(self) -> ChangeEvent:
        return await self.queue.get()

    def close(self) -> None:
        self.closed = True
        self._feed.unsubscribe(self)


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[ChangeSubscription]] = {}

    def subscribe(self, user_id: str, loop: Optional[asyncio.AbstractEventLoop] = None) -> ChangeSubscription:
        subscription = ChangeSubscription(self, user_id, loop or asyncio.get_running_loop())
        with self._lock:
            self._subscribers.setdefault(user_id, []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: ChangeSubscription) -> None:
        with self._lock:
            subs = self._subscribers.get(subscription.user_id, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscribers.pop(subscription.user_id, None)

    def publish(self, change: ChangeEvent) -> int:
        with self._lock:
            subs = list(self._subscribers.get(change.user_id, []))
        delivered = 0
        for subscription in subs:
            if subscription.deliver(change):
                delivered += 1
            else:
                self.unsubscribe(subscription)
        return delivered

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(user_id, []))


change_feed = ChangeFeed()

_feeds: list[ChangeFeed] = []


def _collect(event_type: str):
    def _listener(mapper, connection, target) -> None:
        session = object_session(target)
        if session is None:
            return
        pending = session.info.setdefault(_PENDING_KEY, [])
        pending.append(ChangeEvent(table=mapper.local_table.name, event_type=event_type, user_id=str(target.user_id)))

    return _listener


def _publish(session: Session) -> None:
    pending = session.info.pop(_PENDING_KEY, [])
    for change in pending:
        for feed in list(_feeds):
            feed.publish(change)
    if pending:
        logger.debug("published %d change event(s)", len(pending))


def _discard(session: Session) -> None:
    session.info.pop(_PENDING_KEY, None)


def install_orm_listeners(feed: ChangeFeed = change_feed) -> None:
    """Publish committed habit/log writes to ``feed``. Safe to call repeatedly."""
    if any(existing is feed for existing in _feeds):
        return
    if not _feeds:
        for model in (Habit, HabitLog):
            event.listen(model, "after_insert", _collect(INSERT))
            event.listen(model, "after_update", _collect(UPDATE))
            event.listen(model, "after_delete", _collect(DELETE))
        event.listen(Session, "after_commit", _publish)
        event.listen(Session, "after_rollback", _discard)
    _feeds.append(feed)
