"""Database connection, session and transaction management."""

import threading
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from trafficstore.config import settings
from trafficstore.exceptions import PersistenceError

# Serializes writers so two logical operations never share an open transaction.
write_lock = threading.Lock()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement so interface deletes cascade."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_foreign_keys(db_engine) -> None:
    """Register the foreign key pragma on every new SQLite connection."""
    if db_engine.dialect.name == "sqlite":
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)


def _build_engine(database_url: str, **kwargs):
    """Create a SQLAlchemy engine with appropriate configuration."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    db_engine = create_engine(database_url, connect_args=connect_args, **kwargs)
    enable_foreign_keys(db_engine)
    return db_engine


engine = _build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def get_db():
    """Dependency that provides a database session and ensures cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Run a block of writes as one atomic unit.

    Holds the process write lock for the duration of the block, commits on
    success and rolls back on any exception. SQLAlchemy errors are re-raised
    as PersistenceError so callers see one failure type for backend problems.
    """
    with write_lock:
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(str(exc)) from exc
        except Exception:
            db.rollback()
            raise
