"""Traffic aggregation and retention for the five traffic series.

``record_traffic`` is the write path fed by the sampler: one call adds a
(rx, tx) delta to an interface's lifetime totals and to the matching bucket
of every series, all inside one transaction. ``prune_old_entries`` trims each
series to its retention horizon, also as a single transaction.
"""

import logging
import numbers
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from trafficstore.database import transaction
from trafficstore.models import BIGINT_MAX, Interface
from trafficstore.services.buckets import (
    RESOLUTIONS,
    Resolution,
    TimestampLike,
    get_resolution,
    to_local_datetime,
)
from trafficstore.services.registry import ensure_interface_id, get_interface

logger = logging.getLogger(__name__)


def _upsert_bucket(
    db: Session,
    resolution: Resolution,
    interface_id: int,
    start,
    rx: int,
    tx: int,
) -> None:
    """Create the bucket if absent and add the delta to it in one statement."""
    dialect_insert = (
        pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
    )
    table = resolution.model.__table__
    stmt = dialect_insert(table).values(interface=interface_id, date=start, rx=rx, tx=tx)
    stmt = stmt.on_conflict_do_update(
        index_elements=["interface", "date"],
        set_={
            "rx": table.c.rx + stmt.excluded.rx,
            "tx": table.c.tx + stmt.excluded.tx,
        },
    )
    db.execute(stmt)


def record_traffic(
    db: Session,
    name: str,
    rx: int,
    tx: int,
    timestamp: TimestampLike = None,
) -> bool:
    """Add a traffic delta to an interface and all five series.

    The interface is registered on first use. The total update and the five
    bucket upserts commit together or not at all.

    Args:
        db: Database session.
        name: Interface name.
        rx: Received bytes since the previous sample.
        tx: Transmitted bytes since the previous sample.
        timestamp: When the traffic was observed; defaults to now. Accepts
            the forms described in buckets.to_local_datetime, so traffic can
            be back-dated.

    Returns:
        True if traffic was written, False if both deltas were zero and the
        call did nothing.

    Raises:
        TypeError: If a delta is not an integer.
        ValueError: If a delta is negative or too large, if the lifetime
            totals would leave the BigInteger range, or if the name is empty.
        PersistenceError: If any statement fails; nothing is applied.
    """
    for value in (rx, tx):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise TypeError(
                f"Traffic deltas must be integers, got {type(value).__name__}"
            )
    rx, tx = int(rx), int(tx)
    if rx < 0 or tx < 0:
        raise ValueError(f"Traffic deltas must be non-negative (rx={rx}, tx={tx})")
    if rx > BIGINT_MAX or tx > BIGINT_MAX:
        raise ValueError(f"Traffic deltas must not exceed {BIGINT_MAX} (rx={rx}, tx={tx})")
    if rx == 0 and tx == 0:
        return False

    event_time = to_local_datetime(timestamp)

    with transaction(db):
        interface_id = ensure_interface_id(db, name)
        logger.debug("add %s (%d): rx %d - tx %d", name, interface_id, rx, tx)

        rxtotal, txtotal = db.execute(
            select(Interface.rxtotal, Interface.txtotal).where(
                Interface.id == interface_id
            )
        ).one()
        if rxtotal + rx > BIGINT_MAX or txtotal + tx > BIGINT_MAX:
            raise ValueError(f"Lifetime totals of {name} would exceed {BIGINT_MAX}")

        db.execute(
            update(Interface)
            .where(Interface.id == interface_id)
            .values(
                rxtotal=Interface.rxtotal + rx,
                txtotal=Interface.txtotal + tx,
                updated=event_time,
                active=True,
            )
            .execution_options(synchronize_session=False)
        )

        for resolution in RESOLUTIONS:
            _upsert_bucket(
                db, resolution, interface_id, resolution.floor(event_time), rx, tx
            )

    return True


def prune_old_entries(db: Session, now: TimestampLike = None) -> Dict[str, int]:
    """Delete buckets older than each series' retention horizon.

    Lifetime totals are left untouched. Running again with nothing to
    delete is harmless.

    Args:
        db: Database session.
        now: Reference time for the horizons; defaults to the current time.

    Returns:
        Number of deleted rows per resolution name.

    Raises:
        PersistenceError: If any delete fails; all deletions are rolled back.
    """
    now = to_local_datetime(now)
    deleted = {}

    with transaction(db):
        for resolution in RESOLUTIONS:
            table = resolution.model.__table__
            cutoff = resolution.retention_cutoff(now)
            result = db.execute(delete(table).where(table.c.date < cutoff))
            deleted[resolution.name] = result.rowcount

    logger.info(
        "Pruned old entries: %s",
        ", ".join(f"{name}={count}" for name, count in deleted.items()),
    )
    return deleted


def get_series(
    db: Session, name: str, resolution: str, limit: Optional[int] = None
) -> List:
    """Return the bucket rows of one series for an interface, newest first.

    Raises:
        InterfaceNotFoundError: If the interface is not registered.
        ValueError: If the resolution name is unknown.
    """
    model = get_resolution(resolution).model
    interface = get_interface(db, name)
    query = (
        select(model)
        .where(model.interface == interface.id)
        .order_by(model.date.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return list(db.execute(query).scalars())
