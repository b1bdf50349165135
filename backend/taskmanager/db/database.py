"""Database setup — SQLModel/SQLAlchemy engine with a bounded connection pool.

- SQLite (default): WAL mode so list queries don't block on concurrent writes.
- Other backends: QueuePool capped at ``settings.db_pool_size`` with no
  overflow; callers beyond the cap wait for a free connection.
- Alembic handles migrations (backend/alembic); ``create_db_and_tables`` is
  the zero-config path used at startup and in tests.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from taskmanager.config import settings
from taskmanager.core.errors import Internal

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Get database URL, ensuring the data directory exists."""
    url = settings.database_url
    if url.startswith("sqlite:///"):
        db_path = url.replace("sqlite:///", "")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
    return url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": 0,
        "pool_pre_ping": True,
    }


_url = get_database_url()
engine = create_engine(_url, echo=False, **_engine_options(_url))


if _url.startswith("sqlite"):

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_connection, connection_record):
        """Enable WAL mode and foreign keys on every SQLite connection."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
        cursor.execute("PRAGMA busy_timeout=5000")    # 5s wait on lock
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_and_tables():
    """Create all tables defined by SQLModel metadata."""
    # Table classes must be imported so metadata registers them
    from taskmanager.models.task import Task  # noqa: F401
    from taskmanager.models.user import User  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for FastAPI endpoints."""
    with Session(engine) as session:
        yield session


def commit(session: Session) -> None:
    """Commit the session, translating storage failures into ``Internal``.

    ``IntegrityError`` is re-raised untouched so callers can map unique
    violations onto their own error kind.
    """
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Database commit failed: %s", e, exc_info=True)
        raise Internal("Storage failure.") from e
