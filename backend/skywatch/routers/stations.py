from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from skywatch.database import get_db
from skywatch.errors import StationNotFound
from skywatch.schemas.weather import StationSchema
from skywatch.services import queries

router = APIRouter(prefix="/stations", tags=["stations"])


@router.get("/", response_model=list[StationSchema])
async def list_stations(db: Session = Depends(get_db)):
    """List all stations ordered by name."""
    return queries.list_stations(db)


@router.get("/{station_id}", response_model=StationSchema)
async def get_station(station_id: str, db: Session = Depends(get_db)):
    try:
        return queries.get_station(db, station_id)
    except StationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{station_id}", status_code=204)
async def delete_station(station_id: str, db: Session = Depends(get_db)):
    """Delete a station along with all of its observations, predictions and alerts."""
    try:
        queries.delete_station(db, station_id)
    except StationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
