"""Tests for the dashboard refresh coordinator."""

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from skywatch.errors import StationNotFound
from skywatch.schemas.dashboard import DashboardSnapshot
from skywatch.schemas.weather import SeedSummary, StationSchema
from skywatch.services.change_feed import ChangeEvent, ChangeFeed
from skywatch.services.refresh import DashboardCoordinator, DatabaseSource, RefreshState


def _station(station_id: str, name: str) -> StationSchema:
    return StationSchema(id=station_id, name=name, location="Somewhere", latitude=0, longitude=0)


class FakeSource:
    def __init__(self, stations=None):
        self.stations = stations if stations is not None else [
            _station("a", "Alandi"), _station("b", "Mumbai"),
        ]
        self.fetches: list[str] = []
        self.fail = False
        self.gate: asyncio.Event | None = None

    async def list_stations(self):
        return list(self.stations)

    async def load_snapshot(self, station_id):
        self.fetches.append(station_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("database unavailable")
        station = next((s for s in self.stations if s.id == station_id), None)
        if station is None:
            raise StationNotFound(station_id)
        return DashboardSnapshot(station=station, as_of=datetime.now(timezone.utc))


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def notes():
    return []


@pytest.fixture
async def coordinator(source, feed, notes):
    coord = DashboardCoordinator(source, feed=feed, on_notify=notes.append)
    await coord.mount()
    yield coord
    await coord.unmount()


async def test_mount_selects_first_station_and_refreshes(coordinator, source):
    assert [s.id for s in coordinator.stations] == ["a", "b"]
    assert coordinator.selected_station_id == "a"
    assert coordinator.snapshot.station.id == "a"
    assert source.fetches == ["a"]
    assert coordinator.state is RefreshState.IDLE


async def test_mount_subscribes_to_series_tables(coordinator, feed):
    assert feed.subscriber_count == 3


async def test_unmount_removes_subscriptions(source, feed):
    coord = DashboardCoordinator(source, feed=feed)
    await coord.mount()
    await coord.unmount()
    assert feed.subscriber_count == 0


async def test_mount_without_stations():
    source = FakeSource(stations=[])
    coord = DashboardCoordinator(source, feed=ChangeFeed())
    await coord.mount()
    assert coord.selected_station_id is None
    assert coord.snapshot is None
    assert source.fetches == []
    await coord.unmount()


async def test_select_station_refreshes(coordinator, source):
    snapshot = await coordinator.select_station("b")
    assert snapshot.station.id == "b"
    assert coordinator.snapshot.station.id == "b"
    assert source.fetches == ["a", "b"]


async def test_select_unknown_station(coordinator):
    with pytest.raises(StationNotFound):
        await coordinator.select_station("zzz")
    assert coordinator.selected_station_id == "a"


async def test_change_for_selected_station_triggers_refresh(coordinator, feed, source):
    feed.publish(ChangeEvent(table="weather_data", event_type="INSERT", station_id="a"))
    await coordinator.wait_idle()
    assert source.fetches == ["a", "a"]


async def test_change_for_other_station_ignored(coordinator, feed, source):
    feed.publish(ChangeEvent(table="weather_data", event_type="INSERT", station_id="b"))
    await coordinator.wait_idle()
    assert source.fetches == ["a"]


async def test_table_wide_change_triggers_refresh(coordinator, feed, source):
    feed.publish(ChangeEvent(table="weather_predictions", event_type="DELETE"))
    await coordinator.wait_idle()
    assert source.fetches == ["a", "a"]


async def test_burst_of_changes_is_not_coalesced(coordinator, feed, source):
    for _ in range(3):
        feed.publish(ChangeEvent(table="weather_alerts", event_type="UPDATE", station_id="a"))
    await coordinator.wait_idle()
    assert source.fetches == ["a"] * 4


async def test_failed_refresh_keeps_prior_snapshot(coordinator, source, notes):
    prior = coordinator.snapshot
    source.fail = True

    result = await coordinator.refresh()

    assert result is None
    assert coordinator.snapshot is prior
    assert coordinator.state is RefreshState.IDLE
    assert notes[-1].level == "error"
    assert notes[-1].description == "database unavailable"


async def test_state_is_refreshing_while_fetch_in_flight(coordinator, source):
    source.gate = asyncio.Event()
    task = asyncio.create_task(coordinator.refresh())
    await asyncio.sleep(0)
    assert coordinator.state is RefreshState.REFRESHING

    source.gate.set()
    await task
    assert coordinator.state is RefreshState.IDLE


async def test_stale_fetch_does_not_replace_new_selection(coordinator, source):
    source.gate = asyncio.Event()
    stale = asyncio.create_task(coordinator.refresh())
    await asyncio.sleep(0)

    coordinator.selected_station_id = "b"
    source.gate.set()
    assert await stale is None
    assert coordinator.snapshot.station.id == "a"


async def test_new_active_alert_notifies(coordinator, feed, notes):
    feed.publish(ChangeEvent(
        table="weather_alerts",
        event_type="INSERT",
        station_id="a",
        new={"message": "Heat wave conditions expected.", "severity": "high", "is_active": True},
    ))
    await coordinator.wait_idle()
    assert notes[-1].level == "error"
    assert notes[-1].message == "Heat wave conditions expected."
    assert notes[-1].description == "Severity: high"


async def test_change_from_another_thread(coordinator, feed, source):
    event = ChangeEvent(table="weather_data", event_type="INSERT", station_id="a")
    await asyncio.to_thread(feed.publish, event)
    await coordinator.wait_idle()
    assert source.fetches == ["a", "a"]


async def test_seed_reloads_stations(source, feed, notes):
    async def seed_trigger():
        source.stations = [_station("c", "Nagpur")]
        return SeedSummary(stations=1, data_points=192, predictions=20, alerts=0)

    coord = DashboardCoordinator(source, feed=feed, seed_trigger=seed_trigger, on_notify=notes.append)
    await coord.mount()
    summary = await coord.seed()

    assert summary.stations == 1
    assert coord.selected_station_id == "c"
    assert coord.snapshot.station.id == "c"
    assert notes[-1].level == "success"
    await coord.unmount()


async def test_seed_failure_notifies(source, feed, notes):
    async def seed_trigger():
        raise RuntimeError("function timed out")

    coord = DashboardCoordinator(source, feed=feed, seed_trigger=seed_trigger, on_notify=notes.append)
    await coord.mount()
    assert await coord.seed() is None
    assert notes[-1].level == "error"
    assert notes[-1].message == "Failed to seed weather data"
    assert coord.selected_station_id == "a"
    await coord.unmount()


async def test_database_source_end_to_end(db, seeded):
    source = DatabaseSource()
    coord = DashboardCoordinator(source, feed=ChangeFeed(), seed_trigger=source.seed)
    await coord.mount()
    assert coord.stations[0].name == "Alandi"
    assert coord.snapshot.station.name == "Alandi"
    assert len(coord.snapshot.history) == 48
    await coord.unmount()


async def test_vanished_station_reloads_roster(coordinator, source, notes):
    source.stations = [_station("c", "Nagpur")]

    snapshot = await coordinator.refresh()

    assert snapshot.station.id == "c"
    assert coordinator.selected_station_id == "c"
    assert source.fetches == ["a", "a", "c"]
    assert notes == []


async def test_change_queued_before_unmount_is_dropped(source, feed):
    coord = DashboardCoordinator(source, feed=feed)
    await coord.mount()

    feed.publish(ChangeEvent(table="weather_data", event_type="INSERT", station_id="a"))
    await coord.unmount()
    for _ in range(3):
        await asyncio.sleep(0)

    assert source.fetches == ["a"]
    assert not coord._tasks


async def test_change_after_unmount_is_ignored(source, feed):
    coord = DashboardCoordinator(source, feed=feed)
    await coord.mount()
    await coord.unmount()

    coord._on_change(ChangeEvent(table="weather_data", event_type="INSERT", station_id="a"))
    await coord.wait_idle()
    assert source.fetches == ["a"]


async def test_failing_listener_during_change_refresh_is_logged(source, feed, caplog):
    pushed = []

    def on_snapshot(snapshot):
        pushed.append(snapshot)
        if len(pushed) > 1:
            raise RuntimeError("socket closed")

    coord = DashboardCoordinator(source, feed=feed, on_snapshot=on_snapshot)
    await coord.mount()

    with caplog.at_level(logging.ERROR, logger="skywatch.services.refresh"):
        feed.publish(ChangeEvent(table="weather_data", event_type="INSERT", station_id="a"))
        await coord.wait_idle()
        await asyncio.sleep(0)

    assert len(pushed) == 2
    assert "socket closed" in caplog.text
    assert not coord._tasks
    await coord.unmount()
