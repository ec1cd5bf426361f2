import os
import random

# Must be set before skywatch.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"

import pytest  # noqa: E402

from skywatch.database import SessionLocal, drop_db, init_db  # noqa: E402
from skywatch.services.change_feed import change_feed  # noqa: E402
from skywatch.services.seeder import seed_all  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    init_db()
    change_feed.attach(SessionLocal)
    yield
    drop_db()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def seeded(db):
    return seed_all(db, rng=random.Random(42))
