from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from skywatch.config import settings


def _engine_kwargs(url: str) -> dict:
    if "sqlite" not in url:
        return {}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live per connection; share one across threads
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(
    settings.database_url,
    echo=False,
    **_engine_kwargs(settings.database_url),
)


if "sqlite" in settings.database_url:
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE CASCADE unless this is set per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    import skywatch.models.weather  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_db():
    import skywatch.models.weather  # noqa: F401
    Base.metadata.drop_all(bind=engine)
