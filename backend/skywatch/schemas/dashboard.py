from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from skywatch.schemas.weather import (
    AlertSchema,
    ObservationSchema,
    PredictionSchema,
    StationSchema,
)


class AnalyticsPoint(BaseModel):
    time: datetime
    actual: float
    predicted: float | None = None
    accuracy: float | None = None


class DashboardSnapshot(BaseModel):
    station: StationSchema
    as_of: datetime
    current: ObservationSchema | None = None
    alerts: list[AlertSchema] = []
    history: list[ObservationSchema] = []
    forecast: list[PredictionSchema] = []
    analytics: list[AnalyticsPoint] = []


class Notification(BaseModel):
    level: Literal["info", "success", "warning", "error"]
    message: str
    description: str | None = None
