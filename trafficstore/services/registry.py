"""Interface registry: maps interface names to stable ids and metadata.

Every function takes the SQLAlchemy session as its first argument. Writes
go through ``transaction`` so each call commits or rolls back as a unit;
reads run directly on the session.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import MultipleResultsFound
from sqlalchemy.orm import Session

from trafficstore.database import transaction
from trafficstore.exceptions import InterfaceNotFoundError, InvariantViolationError
from trafficstore.models import BIGINT_MAX, Interface

logger = logging.getLogger(__name__)


def _validate_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValueError("Interface name must not be empty")
    return name


def get_interface_id(db: Session, name: str) -> Optional[int]:
    """Return the id registered for ``name``, or None if there is none."""
    return db.execute(
        select(Interface.id).where(Interface.name == name)
    ).scalar_one_or_none()


def _require_interface_id(db: Session, name: str) -> int:
    interface_id = get_interface_id(db, name)
    if interface_id is None:
        raise InterfaceNotFoundError(name)
    return interface_id


def ensure_interface_id(db: Session, name: str, now: Optional[datetime] = None) -> int:
    """Return the id for ``name``, inserting a fresh row if needed.

    Does not commit: the insert joins whatever transaction the caller holds,
    so a caller that later rolls back also drops the new interface.
    """
    _validate_name(name)
    interface_id = get_interface_id(db, name)
    if interface_id is not None:
        return interface_id

    now = (now or datetime.now()).replace(microsecond=0)
    interface = Interface(
        name=name,
        active=True,
        created=now,
        updated=now,
        rxcounter=0,
        txcounter=0,
        rxtotal=0,
        txtotal=0,
    )
    db.add(interface)
    db.flush()
    interface_id = interface.id
    logger.info("Registered interface %s with id %d", name, interface_id)
    return interface_id


def register_interface(db: Session, name: str) -> int:
    """Register ``name`` if it is new and return its id.

    Raises:
        ValueError: If the name is empty.
        PersistenceError: If the backend rejects the insert.
    """
    with transaction(db):
        interface_id = ensure_interface_id(db, name)
    return interface_id


def get_interface(db: Session, name: str) -> Interface:
    """Load the full interface row for ``name``.

    Raises:
        InterfaceNotFoundError: If no interface is registered under the name.
    """
    interface = db.execute(
        select(Interface).where(Interface.name == name)
    ).scalar_one_or_none()
    if interface is None:
        raise InterfaceNotFoundError(name)
    return interface


def list_interfaces(db: Session) -> List[Interface]:
    """Return every registered interface ordered by name."""
    return list(db.execute(select(Interface).order_by(Interface.name)).scalars())


def get_interface_count(db: Session) -> int:
    return db.execute(select(func.count(Interface.id))).scalar_one()


def _update_interface(db: Session, name: str, **values) -> None:
    with transaction(db):
        interface_id = _require_interface_id(db, name)
        db.execute(
            update(Interface).where(Interface.id == interface_id).values(**values)
        )


def set_active(db: Session, name: str, active: bool) -> None:
    _update_interface(db, name, active=bool(active))


def set_alias(db: Session, name: str, alias: Optional[str]) -> None:
    _update_interface(db, name, alias=alias)


def set_counters(db: Session, name: str, rxcounter: int, txcounter: int) -> None:
    """Store the last raw counter values read by the sampler."""
    if not (0 <= rxcounter <= BIGINT_MAX and 0 <= txcounter <= BIGINT_MAX):
        raise ValueError(
            f"Counters must be between 0 and {BIGINT_MAX} "
            f"(rxcounter={rxcounter}, txcounter={txcounter})"
        )
    _update_interface(db, name, rxcounter=rxcounter, txcounter=txcounter)


def get_counters(db: Session, name: str) -> Tuple[int, int]:
    """Return the stored (rxcounter, txcounter) pair for ``name``.

    Raises:
        InterfaceNotFoundError: If no interface is registered under the name.
        InvariantViolationError: If the name matches more than one row.
    """
    try:
        row = db.execute(
            select(Interface.rxcounter, Interface.txcounter).where(
                Interface.name == name
            )
        ).one_or_none()
    except MultipleResultsFound as exc:
        raise InvariantViolationError(
            f"Expected one counter row for interface '{name}'"
        ) from exc
    if row is None:
        raise InterfaceNotFoundError(name)
    return row.rxcounter, row.txcounter


def remove_interface(db: Session, name: str) -> None:
    """Delete an interface; its traffic series rows cascade with it."""
    with transaction(db):
        interface_id = _require_interface_id(db, name)
        db.execute(delete(Interface).where(Interface.id == interface_id))
    logger.info("Removed interface %s (id %d)", name, interface_id)
