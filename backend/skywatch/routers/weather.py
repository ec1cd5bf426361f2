from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from skywatch.database import get_db
from skywatch.errors import StationNotFound
from skywatch.schemas.dashboard import AnalyticsPoint
from skywatch.schemas.weather import ObservationSchema, PredictionSchema
from skywatch.services import queries

router = APIRouter(prefix="/weather", tags=["weather"])


def _require_station(db: Session, station_id: str):
    try:
        queries.get_station(db, station_id)
    except StationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/current/{station_id}", response_model=ObservationSchema | None)
async def get_current(station_id: str, db: Session = Depends(get_db)):
    """Latest observation for a station, or null before any data exists."""
    _require_station(db, station_id)
    return queries.latest_observation(db, station_id)


@router.get("/history/{station_id}", response_model=list[ObservationSchema])
async def get_history(
    station_id: str,
    limit: int | None = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    _require_station(db, station_id)
    return queries.recent_observations(db, station_id, limit)


@router.get("/forecast/{station_id}", response_model=list[PredictionSchema])
async def get_forecast(
    station_id: str,
    limit: int | None = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    _require_station(db, station_id)
    return queries.forecast(db, station_id, limit)


@router.get("/analytics/{station_id}", response_model=list[AnalyticsPoint])
async def get_analytics(
    station_id: str,
    limit: int | None = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Recent actual temperatures alongside forecast temperatures and confidence."""
    _require_station(db, station_id)
    return queries.analytics(db, station_id, limit)
