from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from skywatch.database import get_db
from skywatch.errors import AlertNotFound, StationNotFound
from skywatch.schemas.weather import AlertSchema, AlertUpdate
from skywatch.services import queries

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("/{station_id}", response_model=list[AlertSchema])
async def get_active_alerts(
    station_id: str,
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Active alerts for a station, newest first."""
    try:
        queries.get_station(db, station_id)
    except StationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return queries.active_alerts(db, station_id, limit)


@router.patch("/{alert_id}", response_model=AlertSchema)
async def update_alert(alert_id: str, req: AlertUpdate, db: Session = Depends(get_db)):
    """Activate or dismiss an alert. ``is_active`` is the only mutable field."""
    try:
        return queries.set_alert_active(db, alert_id, req.is_active)
    except AlertNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
