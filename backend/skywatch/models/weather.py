import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from skywatch.database import Base

SEVERITY_LEVELS = ("low", "medium", "high", "extreme")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Station(Base):
    __tablename__ = "weather_stations"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, unique=True)
    location = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    observations = relationship(
        "Observation", back_populates="station",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    predictions = relationship(
        "Prediction", back_populates="station",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    alerts = relationship(
        "Alert", back_populates="station",
        cascade="all, delete-orphan", passive_deletes=True,
    )


class Observation(Base):
    __tablename__ = "weather_data"
    __table_args__ = (
        Index("idx_weather_data_station_timestamp", "station_id", "timestamp"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    station_id = Column(
        String(36), ForeignKey("weather_stations.id", ondelete="CASCADE"), nullable=False,
    )
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    temperature = Column(Float, nullable=False)
    humidity = Column(Float, nullable=False)
    precipitation = Column(Float, nullable=False, default=0.0)
    wind_speed = Column(Float, nullable=False, default=0.0)
    pressure = Column(Float, nullable=False, default=1013.25)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    station = relationship("Station", back_populates="observations")


class Prediction(Base):
    __tablename__ = "weather_predictions"
    __table_args__ = (
        Index("idx_weather_predictions_station_date", "station_id", "prediction_date"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    station_id = Column(
        String(36), ForeignKey("weather_stations.id", ondelete="CASCADE"), nullable=False,
    )
    prediction_date = Column(DateTime(timezone=True), nullable=False)
    predicted_temp = Column(Float, nullable=False)
    predicted_humidity = Column(Float, nullable=False)
    predicted_precipitation = Column(Float, nullable=False, default=0.0)
    confidence = Column(Float, nullable=False, default=85.0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    station = relationship("Station", back_populates="predictions")


class Alert(Base):
    __tablename__ = "weather_alerts"
    __table_args__ = (
        CheckConstraint(
            "severity IN (" + ", ".join(f"'{s}'" for s in SEVERITY_LEVELS) + ")",
            name="ck_weather_alerts_severity",
        ),
        Index("idx_weather_alerts_station_active", "station_id", "is_active"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    station_id = Column(
        String(36), ForeignKey("weather_stations.id", ondelete="CASCADE"), nullable=False,
    )
    alert_type = Column(String(100), nullable=False)
    severity = Column(String(10), nullable=False)  # low, medium, high, extreme
    message = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    station = relationship("Station", back_populates="alerts")
