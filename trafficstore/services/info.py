"""Key/value metadata store for schema and tool version stamps."""

from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from trafficstore.database import transaction
from trafficstore.models import Info


def set_info(
    db: Session, name: str, value: str, create_if_missing: bool = False
) -> bool:
    """Store ``value`` under ``name``.

    Updates the existing entry, or inserts one when the key is absent and
    ``create_if_missing`` is set.

    Returns:
        True if a row was written, False if the key is absent and creation
        was not requested.

    Raises:
        PersistenceError: If the backend rejects the write.
    """
    with transaction(db):
        result = db.execute(update(Info).where(Info.name == name).values(value=value))
        if result.rowcount == 0:
            if not create_if_missing:
                return False
            db.execute(insert(Info).values(name=name, value=value))
    return True


def get_info(db: Session, name: str) -> str:
    """Return the value stored under ``name``, or an empty string if unset."""
    value = db.execute(select(Info.value).where(Info.name == name)).scalar_one_or_none()
    return value if value is not None else ""
