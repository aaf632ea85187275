"""
Engine and session plumbing.

One engine per process, built from DATABASE_URL. On sqlite the connection is
tuned so listings keep their `ON DELETE SET NULL` submitter links and
concurrent view counters wait for the write lock instead of failing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from realtor.config import database_url

# Seconds a sqlite writer waits on a locked database.
SQLITE_BUSY_TIMEOUT = 15


def _enable_sqlite_foreign_keys(dbapi_conn: Any, _record: Any) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def make_engine(url: str) -> Engine:
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_engine(url, connect_args={"timeout": SQLITE_BUSY_TIMEOUT})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True, pool_recycle=1800)


ENGINE = make_engine(database_url())
SessionLocal = sessionmaker(bind=ENGINE, expire_on_commit=False, autoflush=False)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Unit of work: commit on success, roll back and re-raise on any error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    # Local sqlite runs and tests only; deployed schemas come from Alembic.
    from realtor.models import Base

    Base.metadata.create_all(ENGINE)


def get_db() -> Iterator[Session]:
    with session_scope() as db:
        yield db
