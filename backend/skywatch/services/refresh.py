"""Keeps one dashboard view in step with the weather tables.

A ``DashboardCoordinator`` owns the station list, the selected station and
the last fetched snapshot. It is Idle while showing that snapshot and
Refreshing while a fetch is in flight. Mounting, changing the selection and
any change notification for the selected station start a refresh. Bursts of
notifications are not coalesced; every refresh is a plain re-read, so
duplicate or dropped notifications cannot corrupt state.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from skywatch.database import SessionLocal
from skywatch.errors import StationNotFound
from skywatch.schemas.dashboard import DashboardSnapshot, Notification
from skywatch.schemas.weather import SeedSummary, StationSchema
from skywatch.services import queries, seeder
from skywatch.services.change_feed import ChangeEvent, ChangeFeed, Subscription, change_feed

logger = logging.getLogger(__name__)

WATCHED_TABLES = ("weather_data", "weather_predictions", "weather_alerts")

Listener = Callable[[Any], Any]


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class DashboardSource(Protocol):
    async def list_stations(self) -> list[StationSchema]: ...

    async def load_snapshot(self, station_id: str) -> DashboardSnapshot: ...


class DatabaseSource:
    """Reads straight from the local database, one session per call."""

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def _run(self, fn, *args):
        db = self._session_factory()
        try:
            return fn(db, *args)
        finally:
            db.close()

    async def list_stations(self) -> list[StationSchema]:
        return self._run(queries.list_stations)

    async def load_snapshot(self, station_id: str) -> DashboardSnapshot:
        return self._run(queries.load_snapshot, station_id)

    async def seed(self) -> SeedSummary:
        return self._run(seeder.seed_all)


class DashboardCoordinator:
    def __init__(
        self,
        source: DashboardSource,
        feed: ChangeFeed = change_feed,
        seed_trigger: Callable[[], Awaitable[SeedSummary]] | None = None,
        on_stations: Listener | None = None,
        on_snapshot: Listener | None = None,
        on_notify: Listener | None = None,
    ):
        self._source = source
        self._feed = feed
        self._seed_trigger = seed_trigger
        self._on_stations = on_stations
        self._on_snapshot = on_snapshot
        self._on_notify = on_notify

        self.stations: list[StationSchema] = []
        self.selected_station_id: str | None = None
        self.snapshot: DashboardSnapshot | None = None

        self._in_flight = 0
        self._subscriptions: list[Subscription] = []
        self._tasks: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @property
    def state(self) -> RefreshState:
        return RefreshState.REFRESHING if self._in_flight else RefreshState.IDLE

    async def mount(self):
        self._loop = asyncio.get_running_loop()
        self._closed = False
        await self.load_stations()
        if not self._subscriptions:
            self._subscriptions = [
                self._feed.subscribe(table, self._on_change) for table in WATCHED_TABLES
            ]
        await self.refresh()

    async def unmount(self):
        # Changes already queued on the loop must not start work after this
        self._closed = True
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions = []
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def load_stations(self) -> list[StationSchema]:
        try:
            stations = await self._source.list_stations()
        except Exception as e:
            logger.error("Error loading stations: %s", e)
            await self._notify(Notification(
                level="error", message="Failed to load weather stations", description=str(e),
            ))
            return self.stations

        self.stations = stations
        if self.selected_station_id not in {s.id for s in stations}:
            self.selected_station_id = stations[0].id if stations else None
            self.snapshot = None
        await _emit(self._on_stations, stations)
        return stations

    async def select_station(self, station_id: str) -> DashboardSnapshot | None:
        if station_id not in {s.id for s in self.stations}:
            raise StationNotFound(station_id)
        self.selected_station_id = station_id
        return await self.refresh()

    async def refresh(self) -> DashboardSnapshot | None:
        """Re-fetch the selected station. On failure the prior snapshot stays."""
        station_id = self.selected_station_id
        if station_id is None:
            return None

        self._in_flight += 1
        try:
            snapshot = await self._source.load_snapshot(station_id)
        except StationNotFound:
            # Station vanished, typically in a reseed: pick up the new roster
            logger.info("Station %s no longer exists, reloading stations", station_id)
            snapshot = None
        except Exception as e:
            logger.error("Error loading weather for station %s: %s", station_id, e)
            await self._notify(Notification(
                level="error", message="Failed to load weather data", description=str(e),
            ))
            return None
        finally:
            self._in_flight -= 1

        if snapshot is None:
            await self.load_stations()
            if self.selected_station_id not in (None, station_id):
                return await self.refresh()
            return None

        # Selection moved on while this fetch was in flight
        if station_id != self.selected_station_id:
            return None

        self.snapshot = snapshot
        await _emit(self._on_snapshot, snapshot)
        return snapshot

    async def seed(self) -> SeedSummary | None:
        if self._seed_trigger is None:
            raise RuntimeError("No seed trigger configured")
        try:
            summary = await self._seed_trigger()
        except Exception as e:
            logger.error("Error seeding data: %s", e)
            await self._notify(Notification(
                level="error", message="Failed to seed weather data", description=str(e),
            ))
            return None

        await self._notify(Notification(
            level="success", message="Weather data seeded successfully!",
        ))
        await self.load_stations()
        await self.refresh()
        return summary

    async def wait_idle(self):
        """Wait for refreshes started by change notifications."""
        # Let callbacks queued with call_soon_threadsafe spawn their tasks
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_change(self, change: ChangeEvent):
        # May run on whichever thread committed the change
        if self._closed:
            return
        if change.station_id is not None and change.station_id != self.selected_station_id:
            return
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._handle_change, change)

    def _handle_change(self, change: ChangeEvent):
        if self._closed:
            return
        if _is_new_active_alert(change):
            self._spawn(self._notify(Notification(
                level="error",
                message=change.new["message"],
                description=f"Severity: {change.new['severity']}",
            )))
        self._spawn(self.refresh())

    def _spawn(self, coro):
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Change-triggered refresh failed: %s", exc)

    async def _notify(self, notification: Notification):
        await _emit(self._on_notify, notification)


def _is_new_active_alert(change: ChangeEvent) -> bool:
    return (
        change.table == "weather_alerts"
        and change.event_type == "INSERT"
        and bool(change.new)
        and bool(change.new.get("is_active"))
    )


async def _emit(listener: Listener | None, value):
    if listener is None:
        return
    result = listener(value)
    if inspect.isawaitable(result):
        await result
