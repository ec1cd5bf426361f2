import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from skywatch.database import get_db
from skywatch.errors import SeedError
from skywatch.schemas.weather import SeedResponse
from skywatch.services.seeder import seed_all

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/seed", response_model=SeedResponse)
async def seed(db: Session = Depends(get_db)):
    """Replace all stations and their series with freshly generated data."""
    try:
        summary = seed_all(db)
    except SeedError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    return JSONResponse(
        content=SeedResponse(stats=summary).model_dump(by_alias=True),
    )
