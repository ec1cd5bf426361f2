import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skywatch.config import settings
from skywatch.database import SessionLocal, init_db
from skywatch.services.change_feed import change_feed

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    change_feed.attach(SessionLocal)
    if settings.seed_on_startup:
        _initial_seed()
    if settings.scheduler_enabled:
        from skywatch.tasks.scheduler import start_scheduler
        start_scheduler()
    yield
    if settings.scheduler_enabled:
        from skywatch.tasks.scheduler import stop_scheduler
        stop_scheduler()


def _initial_seed():
    """Seed on startup when the database has no stations yet."""
    from skywatch.models.weather import Station
    from skywatch.services.seeder import seed_all
    db = SessionLocal()
    try:
        if db.query(Station).count() == 0:
            logger.info("No stations found, seeding initial data...")
            seed_all(db)
    except Exception as e:
        logger.error("Initial seed failed: %s", e)
    finally:
        db.close()


app = FastAPI(
    title="SkyWatch",
    description="Weather station monitoring: conditions, trends, forecasts and alerts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from skywatch.routers import admin, alerts, dashboard, realtime, stations, weather  # noqa: E402

app.include_router(stations.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")
app.include_router(alerts.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(realtime.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
