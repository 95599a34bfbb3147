"""SQLAlchemy engine, session factory and schema bootstrap."""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from ..core.config import settings

IS_SQLITE = settings.DB_URL.startswith("sqlite")
# For SQLite, ensure ``check_same_thread=False`` so the connection can be shared
# by FastAPI worker threads. Other database engines ignore this argument.
CONNECT_ARGS = {"check_same_thread": False} if IS_SQLITE else {}

# One engine (and connection pool) per process. ``pool_pre_ping`` replaces
# connections a MySQL/PostgreSQL server has dropped while idle.
engine = create_engine(settings.DB_URL, connect_args=CONNECT_ARGS, pool_pre_ping=True)
# ``SessionLocal`` builds a new session per request.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
# Parent class for every model in app/models.
Base = declarative_base()


if IS_SQLITE:

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
        # SQLite leaves FOREIGN KEY clauses unenforced unless asked per connection.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables and apply the additive migrations."""

    # Importing the models registers them with ``Base.metadata``.
    from ..models import app_settings, time_entry, user  # noqa: F401
    from .migrate import run_migrations

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    run_migrations(target)


def get_db():
    """FastAPI dependency that yields a session and guarantees cleanup."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
