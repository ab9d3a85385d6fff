"""Schema creation, version stamping and maintenance for the traffic database."""

import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trafficstore.config import settings
from trafficstore.database import Base
from trafficstore.exceptions import PersistenceError
from trafficstore.services.info import get_info, set_info

logger = logging.getLogger(__name__)

DB_VERSION = "1"


def initialize_database(db: Session, tool_version: str = None) -> bool:
    """Create the schema if it is missing and stamp the version info.

    ``dbversion`` is written only when the schema is created by this call;
    ``toolversion`` is refreshed every time.

    Args:
        db: Database session bound to the target engine.
        tool_version: Version to stamp; defaults to settings.TOOL_VERSION.

    Returns:
        True if the schema was created, False if it already existed.

    Raises:
        PersistenceError: If writing the version info fails.
    """
    bind = db.get_bind()
    created = not inspect(bind).has_table("interface")
    Base.metadata.create_all(bind=bind)

    if created:
        logger.info("Database structure created")
        set_info(db, "dbversion", DB_VERSION, create_if_missing=True)
    else:
        stored = get_info(db, "dbversion")
        if stored != DB_VERSION:
            logger.warning(
                "Database version %r does not match expected version %r",
                stored,
                DB_VERSION,
            )

    set_info(db, "toolversion", tool_version or settings.TOOL_VERSION, create_if_missing=True)
    return created


def vacuum_database(db: Session) -> None:
    """Rebuild the SQLite file to reclaim space freed by pruning.

    Raises:
        PersistenceError: If the VACUUM statement fails, for example because
            another connection holds a lock.
    """
    bind = db.get_bind()
    if bind.dialect.name != "sqlite":
        logger.debug("VACUUM skipped for %s backend", bind.dialect.name)
        return
    # VACUUM cannot run inside a transaction.
    try:
        with bind.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
            conn.exec_driver_sql("VACUUM")
    except SQLAlchemyError as exc:
        raise PersistenceError(f"VACUUM failed: {exc}") from exc
    logger.info("Database vacuumed")
