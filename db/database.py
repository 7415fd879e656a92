"""
Engine, sessions and schema creation.

The API owns its transactions explicitly (`get_db_dependency` never
commits); scripts and the dashboard use `get_db()`, which commits on a
clean exit and rolls back on any exception.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config.settings import settings
from db.models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
    is_sqlite = url.startswith("sqlite")
    new_engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=echo,
    )
    if is_sqlite:
        # SQLite ignores ON DELETE CASCADE unless asked per connection
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return new_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None) -> None:
    """Create missing tables (idempotent)."""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info(f"Database ready at {bind.url.render_as_string(hide_password=True)}")


@contextmanager
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db_dependency() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, caller commits."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
