"""In-process change notifications for the weather tables.

Rows flushed by a session are collected in ``session.info`` and published
once the session commits; a rollback discards them. Bulk statements that
bypass the unit of work (``query.delete()``, ``insert()`` executemany) must
queue their own events with :meth:`ChangeFeed.record`.

Subscribers re-fetch on every event, so there is no ordering or dedup
guarantee: a burst of commits yields a burst of callbacks.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

EventType = Literal["INSERT", "UPDATE", "DELETE"]
ChangeCallback = Callable[["ChangeEvent"], None]

_PENDING_KEY = "skywatch_pending_changes"
_STATION_TABLE = "weather_stations"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: EventType
    station_id: str | None = None  # None: the change may touch every station
    record_id: str | None = None
    new: dict[str, Any] | None = field(default=None, compare=False)


class Subscription:
    def __init__(
        self,
        feed: "ChangeFeed",
        table: str,
        callback: ChangeCallback,
        station_id: str | None = None,
    ):
        self._feed = feed
        self.table = table
        self.callback = callback
        self.station_id = station_id

    def matches(self, change: ChangeEvent) -> bool:
        if self.table != "*" and self.table != change.table:
            return False
        if self.station_id is None or change.station_id is None:
            return True
        return self.station_id == change.station_id

    def unsubscribe(self):
        self._feed.unsubscribe(self)


class ChangeFeed:
    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        station_id: str | None = None,
    ) -> Subscription:
        """Register ``callback`` for changes on ``table`` ("*" for all tables)."""
        sub = Subscription(self, table, callback, station_id)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription):
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, change: ChangeEvent):
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(change)]
        for sub in targets:
            try:
                sub.callback(change)
            except Exception:
                logger.exception(
                    "Change subscriber failed for %s %s", change.event_type, change.table,
                )

    def record(self, session: Session, change: ChangeEvent):
        """Queue an event to publish when ``session`` commits."""
        session.info.setdefault(_PENDING_KEY, []).append(change)

    def attach(self, target):
        """Hook the feed into a sessionmaker (or Session class)."""
        if event.contains(target, "after_flush", self._after_flush):
            return
        event.listen(target, "after_flush", self._after_flush)
        event.listen(target, "after_commit", self._after_commit)
        event.listen(target, "after_rollback", self._after_rollback)

    def detach(self, target):
        if not event.contains(target, "after_flush", self._after_flush):
            return
        event.remove(target, "after_flush", self._after_flush)
        event.remove(target, "after_commit", self._after_commit)
        event.remove(target, "after_rollback", self._after_rollback)

    def _after_flush(self, session: Session, flush_context):
        for obj in session.new:
            self._record_row(session, obj, "INSERT")
        for obj in session.dirty:
            if session.is_modified(obj, include_collections=False):
                self._record_row(session, obj, "UPDATE")
        for obj in session.deleted:
            self._record_row(session, obj, "DELETE")

    def _after_commit(self, session: Session):
        pending = session.info.pop(_PENDING_KEY, [])
        for change in pending:
            self.publish(change)

    def _after_rollback(self, session: Session):
        session.info.pop(_PENDING_KEY, None)

    def _record_row(self, session: Session, obj, event_type: EventType):
        table = getattr(obj, "__tablename__", None)
        if table is None:
            return
        mapper = inspect(obj).mapper
        row = {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}
        if table == _STATION_TABLE:
            station_id = row.get("id")
        else:
            station_id = row.get("station_id")
        self.record(session, ChangeEvent(
            table=table,
            event_type=event_type,
            station_id=station_id,
            record_id=row.get("id"),
            new=row,
        ))


change_feed = ChangeFeed()
