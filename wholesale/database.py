"""Database connection and session factory.

One ``Database`` object owns the engine and the session factory. It is built
once by ``create_app()`` and stored on ``app.state``; request handlers get a
session through the ``get_db`` dependency.

All naive datetimes read back from the database are tagged as UTC so that
comparisons against ``datetime.now(timezone.utc)`` never mix naive and aware.
"""

import logging
from contextlib import contextmanager
from datetime import timezone

from fastapi import Request
from sqlalchemy import DateTime, TypeDecorator, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

log = logging.getLogger("wholesale.database")


class UTCDateTime(TypeDecorator):
    """DateTime type that ensures UTC timezone on load."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {
                "pool_size": 10,
                "max_overflow": 20,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
                "connect_args": {"connect_timeout": 10},
            }
        self.engine = create_engine(url, echo=echo, **kwargs)
        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _sqlite_pragmas)
            event.listen(self.engine, "begin", _sqlite_begin)
        elif url.startswith("postgres"):
            event.listen(self.engine, "connect", _set_timezone)

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        from .models import Base

        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def dispose(self) -> None:
        self.engine.dispose()


def _sqlite_pragmas(dbapi_conn, connection_record):
    """SQLite ignores FKs by default, turn them on.

    pysqlite's own BEGIN handling is switched off so SQLAlchemy emits BEGIN
    itself; without that SAVEPOINT (session.begin_nested) misbehaves.
    """
    dbapi_conn.isolation_level = None
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


def _set_timezone(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("SET timezone = 'UTC'")
    cursor.close()


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Commit on success; roll back and re-raise on any error.

    Every multi-write business operation runs inside one of these so a failure
    part-way through never leaves partial rows behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
