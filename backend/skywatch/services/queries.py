"""Read side of the weather tables, shaped for the dashboard views."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from skywatch.config import settings
from skywatch.errors import AlertNotFound, StationNotFound
from skywatch.models.weather import Alert, Observation, Prediction, Station
from skywatch.schemas.dashboard import AnalyticsPoint, DashboardSnapshot
from skywatch.schemas.weather import (
    AlertSchema,
    ObservationSchema,
    PredictionSchema,
    StationSchema,
)

logger = logging.getLogger(__name__)


def list_stations(db: Session) -> list[StationSchema]:
    rows = db.query(Station).order_by(Station.name).all()
    return [StationSchema.model_validate(r) for r in rows]


def get_station(db: Session, station_id: str) -> StationSchema:
    row = db.get(Station, station_id)
    if row is None:
        raise StationNotFound(station_id)
    return StationSchema.model_validate(row)


def delete_station(db: Session, station_id: str):
    """Remove a station; its observations, predictions and alerts go with it."""
    row = db.get(Station, station_id)
    if row is None:
        raise StationNotFound(station_id)
    name = row.name
    db.delete(row)
    db.commit()
    logger.info("Deleted station %s (%s)", name, station_id)


def latest_observation(db: Session, station_id: str) -> ObservationSchema | None:
    row = (
        db.query(Observation)
        .filter(Observation.station_id == station_id)
        .order_by(Observation.timestamp.desc())
        .first()
    )
    return ObservationSchema.model_validate(row) if row else None


def recent_observations(
    db: Session, station_id: str, limit: int | None = None,
) -> list[ObservationSchema]:
    """The newest ``limit`` observations, returned oldest first for charting."""
    rows = (
        db.query(Observation)
        .filter(Observation.station_id == station_id)
        .order_by(Observation.timestamp.desc())
        .limit(limit or settings.history_limit)
        .all()
    )
    return [ObservationSchema.model_validate(r) for r in reversed(rows)]


def forecast(
    db: Session, station_id: str, limit: int | None = None,
) -> list[PredictionSchema]:
    rows = (
        db.query(Prediction)
        .filter(Prediction.station_id == station_id)
        .order_by(Prediction.prediction_date)
        .limit(limit or settings.forecast_limit)
        .all()
    )
    return [PredictionSchema.model_validate(r) for r in rows]


def active_alerts(
    db: Session, station_id: str, limit: int | None = None,
) -> list[AlertSchema]:
    rows = (
        db.query(Alert)
        .filter(Alert.station_id == station_id, Alert.is_active.is_(True))
        .order_by(Alert.created_at.desc())
        .limit(limit or settings.alerts_limit)
        .all()
    )
    return [AlertSchema.model_validate(r) for r in rows]


def set_alert_active(db: Session, alert_id: str, active: bool) -> AlertSchema:
    row = db.get(Alert, alert_id)
    if row is None:
        raise AlertNotFound(alert_id)
    row.is_active = active
    db.commit()
    db.refresh(row)
    return AlertSchema.model_validate(row)


def analytics(
    db: Session, station_id: str, limit: int | None = None,
) -> list[AnalyticsPoint]:
    """Recent actual temperatures next to forecast temperatures, paired by position.

    The pairing is positional, not by timestamp: the i-th most recent hour is
    shown against the i-th upcoming forecast step. ``accuracy`` is that
    step's confidence, or the mean confidence when there is no step.
    """
    limit = limit or settings.analytics_limit
    history = recent_observations(db, station_id, limit)
    predictions = forecast(db, station_id, limit)

    if predictions:
        avg_confidence = sum(p.confidence for p in predictions) / len(predictions)
    else:
        avg_confidence = None

    points = []
    for idx, obs in enumerate(history):
        pred = predictions[idx] if idx < len(predictions) else None
        accuracy = pred.confidence if pred else avg_confidence
        points.append(AnalyticsPoint(
            time=obs.timestamp,
            actual=obs.temperature,
            predicted=pred.predicted_temp if pred else None,
            accuracy=round(accuracy, 2) if accuracy is not None else None,
        ))
    return points


def load_snapshot(db: Session, station_id: str) -> DashboardSnapshot:
    station = get_station(db, station_id)
    return DashboardSnapshot(
        station=station,
        as_of=datetime.now(timezone.utc),
        current=latest_observation(db, station_id),
        alerts=active_alerts(db, station_id),
        history=recent_observations(db, station_id),
        forecast=forecast(db, station_id),
        analytics=analytics(db, station_id),
    )
