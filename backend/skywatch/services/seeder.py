"""Replace every station and its series with freshly generated data."""

import logging
import random
import threading
from datetime import datetime, timezone

from sqlalchemy import insert
from sqlalchemy.orm import Session

from skywatch.config import settings
from skywatch.errors import SeedError
from skywatch.models.weather import Alert, Observation, Prediction, Station
from skywatch.schemas.weather import SeedSummary
from skywatch.services import generator
from skywatch.services.change_feed import ChangeEvent, change_feed
from skywatch.stations.profiles import STATIONS, StationDefinition, get_profile

logger = logging.getLogger(__name__)

# Serializes reseeds within this process; two concurrent delete-then-insert
# runs would otherwise interleave.
_seed_lock = threading.Lock()


def _make_rng() -> random.Random:
    return random.Random(settings.random_seed)


def seed_all(
    db: Session,
    rng: random.Random | None = None,
    now: datetime | None = None,
    stations: list[StationDefinition] | None = None,
) -> SeedSummary:
    """Wipe all four tables and reseed them in a single transaction.

    Station rows are replaced, not duplicated: after any number of runs there
    is exactly one row per station name (ids change on every run). If any step
    fails nothing is committed and ``SeedError`` is raised.
    """
    rng = rng or _make_rng()
    now = now or datetime.now(timezone.utc)
    roster = stations if stations is not None else STATIONS

    with _seed_lock:
        try:
            summary = _reseed(db, rng, now, roster)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Seeding failed: %s", e)
            raise SeedError(str(e)) from e

    logger.info(
        "Seeded %d stations: %d observations, %d predictions, %d alerts",
        summary.stations, summary.data_points, summary.predictions, summary.alerts,
    )
    return summary


def _reseed(
    db: Session,
    rng: random.Random,
    now: datetime,
    roster: list[StationDefinition],
) -> SeedSummary:
    for model in (Alert, Prediction, Observation, Station):
        db.query(model).delete(synchronize_session=False)
        change_feed.record(db, ChangeEvent(table=model.__tablename__, event_type="DELETE"))

    station_rows = [
        Station(
            name=s.name,
            location=s.location,
            latitude=s.latitude,
            longitude=s.longitude,
        )
        for s in roster
    ]
    db.add_all(station_rows)
    db.flush()

    observations: list[dict] = []
    predictions: list[dict] = []
    alerts: list[dict] = []
    for station in station_rows:
        profile = get_profile(station.name)
        observations.extend(
            o.model_dump() for o in generator.generate_observations(
                station.id, profile, rng, now, days=settings.seed_history_days,
            )
        )
        predictions.extend(
            p.model_dump() for p in generator.generate_predictions(
                station.id, profile, rng, now,
                days=settings.seed_forecast_days,
                step_hours=settings.forecast_step_hours,
            )
        )
        alerts.extend(
            a.model_dump() for a in generator.generate_alerts(station.id, profile, rng)
        )

    for model, rows in ((Observation, observations), (Prediction, predictions)):
        if not rows:
            continue
        db.execute(insert(model), rows)
        # One notification per station and table instead of one per row
        for station_id in sorted({r["station_id"] for r in rows}):
            change_feed.record(db, ChangeEvent(
                table=model.__tablename__,
                event_type="INSERT",
                station_id=station_id,
            ))

    # Alerts go through the unit of work so each INSERT event carries its row
    db.add_all(Alert(**a) for a in alerts)
    db.flush()

    return SeedSummary(
        stations=len(station_rows),
        data_points=len(observations),
        predictions=len(predictions),
        alerts=len(alerts),
    )


def append_live_observations(
    db: Session,
    rng: random.Random | None = None,
    at: datetime | None = None,
) -> int:
    """Add one current reading per station. Returns the number of rows written."""
    rng = rng or _make_rng()
    at = at or datetime.now(timezone.utc)

    stations = db.query(Station).order_by(Station.name).all()
    for station in stations:
        reading = generator.generate_live_observation(
            station.id, get_profile(station.name), rng, at,
        )
        db.add(Observation(**reading.model_dump()))
    db.commit()
    return len(stations)
