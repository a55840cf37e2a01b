"""SQLAlchemy engine, session factory and schema bootstrap."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import settings
from .migrate import run_migrations

IS_SQLITE = settings.database_url.startswith("sqlite")

# SQLite connections are shared across FastAPI's worker threads.
CONNECT_ARGS = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(settings.database_url, connect_args=CONNECT_ARGS, pool_pre_ping=not IS_SQLITE)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables, then bring older SQLite files up to date."""

    from ..models import computer  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    run_migrations(bind)


def get_db():
    """FastAPI dependency that yields a session and always closes it."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
