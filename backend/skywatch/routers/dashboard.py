from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from skywatch.database import get_db
from skywatch.errors import StationNotFound
from skywatch.schemas.dashboard import DashboardSnapshot
from skywatch.services import queries

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/{station_id}", response_model=DashboardSnapshot)
async def get_dashboard(station_id: str, db: Session = Depends(get_db)):
    """Composite dashboard payload: current, alerts, history, forecast, analytics."""
    try:
        return queries.load_snapshot(db, station_id)
    except StationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
