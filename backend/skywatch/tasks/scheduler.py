"""APScheduler setup for the periodic live observation tick."""

import logging
import random

from apscheduler.schedulers.background import BackgroundScheduler

from skywatch.config import settings

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None
# Created on the first tick and shared by every later one
_rng: random.Random | None = None


def _run_observation_tick():
    global _rng
    from skywatch.database import SessionLocal
    from skywatch.services.seeder import append_live_observations
    if _rng is None:
        _rng = random.Random(settings.random_seed)
    db = SessionLocal()
    try:
        count = append_live_observations(db, rng=_rng)
        logger.info("Observation tick wrote %d readings", count)
    except Exception as e:
        db.rollback()
        logger.error("Observation tick failed: %s", e)
    finally:
        db.close()


def start_scheduler():
    global _scheduler
    if settings.observation_tick_interval <= 0:
        logger.info("Observation tick disabled; scheduler not started")
        return

    _scheduler = BackgroundScheduler()
    _scheduler.add_job(
        _run_observation_tick,
        "interval",
        minutes=settings.observation_tick_interval,
        id="observation_tick",
        name="Live observation tick",
        max_instances=1,
    )
    _scheduler.start()
    logger.info(
        "Scheduler started: observation tick every %d min",
        settings.observation_tick_interval,
    )


def stop_scheduler():
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
