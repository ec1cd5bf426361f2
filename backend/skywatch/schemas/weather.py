from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Severity = Literal["low", "medium", "high", "extreme"]


class StationSchema(BaseModel):
    id: str
    name: str
    location: str
    latitude: float
    longitude: float

    model_config = {"from_attributes": True}


class ObservationCreate(BaseModel):
    station_id: str
    timestamp: datetime
    temperature: float
    humidity: float
    precipitation: float = 0.0
    wind_speed: float = 0.0
    pressure: float = 1013.25


class ObservationSchema(ObservationCreate):
    id: str

    model_config = {"from_attributes": True}


class PredictionCreate(BaseModel):
    station_id: str
    prediction_date: datetime
    predicted_temp: float
    predicted_humidity: float
    predicted_precipitation: float = 0.0
    confidence: float = 85.0


class PredictionSchema(PredictionCreate):
    id: str

    model_config = {"from_attributes": True}


class AlertCreate(BaseModel):
    station_id: str
    alert_type: str
    severity: Severity
    message: str
    is_active: bool = True


class AlertSchema(AlertCreate):
    id: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class AlertUpdate(BaseModel):
    is_active: bool


class SeedSummary(BaseModel):
    """Row counts written by one seeding run. Serialized with camelCase keys."""

    stations: int = 0
    data_points: int = Field(default=0, alias="dataPoints")
    predictions: int = 0
    alerts: int = 0

    model_config = {"populate_by_name": True}


class SeedResponse(BaseModel):
    success: bool = True
    message: str = "Weather data seeded successfully"
    stats: SeedSummary
