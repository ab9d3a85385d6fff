"""Bulk import of traffic deltas from CSV files.

Used to back-fill history, for example when migrating from another
monitoring tool. Each row is one (interface, timestamp, rx, tx) delta and is
applied through ``record_traffic``, so it lands in all five series exactly
as a live sample would.
"""

import logging

import pandas as pd
from sqlalchemy.orm import Session

from trafficstore.models import BIGINT_MAX
from trafficstore.services.traffic import record_traffic

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"interface", "timestamp", "rx", "tx"}


def validate_dataframe(df: pd.DataFrame) -> None:
    """Validate that the DataFrame has all required columns.

    Args:
        df: The pandas DataFrame to validate.

    Raises:
        ValueError: If required columns are missing.
    """
    df.columns = df.columns.str.strip()
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")


def prepare_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """Clean and type-check the imported columns.

    Interface names are stripped, timestamps parsed, and rx/tx converted to
    integers.

    Raises:
        ValueError: If any interface name is blank, any timestamp cannot be
            parsed, or any delta is non-numeric, negative, fractional or
            larger than a BigInteger column holds.
    """
    validate_dataframe(df)
    df = df.copy()

    df["interface"] = df["interface"].astype(str).str.strip()
    if df["interface"].isin(["", "nan"]).any():
        raise ValueError("Blank interface names found in 'interface' column")

    try:
        df["timestamp"] = pd.to_datetime(df["timestamp"].astype(str).str.strip())
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid timestamp values: {exc}")
    if df["timestamp"].isna().any():
        raise ValueError("Invalid timestamp values: blank or unparseable entries")

    for column in ("rx", "tx"):
        values = pd.to_numeric(df[column], errors="coerce")
        if values.isna().any():
            raise ValueError(f"Invalid numeric values found in '{column}' column")
        if (values < 0).any():
            raise ValueError(f"Negative values found in '{column}' column")
        if (values % 1 != 0).any():
            raise ValueError(f"Non-integer values found in '{column}' column")
        if (values > BIGINT_MAX).any():
            raise ValueError(f"Values above {BIGINT_MAX} found in '{column}' column")
        df[column] = values.astype("int64")

    return df


def import_traffic(csv_path: str, session: Session) -> int:
    """Record every delta of a CSV file.

    Rows are applied in file order, one transaction per row. A failure stops
    the import; rows already applied stay committed.

    Args:
        csv_path: Path to a CSV file with interface, timestamp, rx and tx
            columns.
        session: SQLAlchemy database session.

    Returns:
        Number of rows that wrote traffic. Rows with zero rx and tx are
        skipped by the aggregator and not counted.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If the CSV file has invalid structure or data.
        PersistenceError: If recording a row fails.
    """
    logger.info("Reading CSV file: %s", csv_path)
    df = pd.read_csv(csv_path)
    df = prepare_dataframe(df)

    if df.empty:
        logger.warning("CSV file is empty (no data rows): %s", csv_path)
        return 0

    recorded = 0
    for row in df.itertuples(index=False):
        if record_traffic(
            session,
            row.interface,
            int(row.rx),
            int(row.tx),
            timestamp=row.timestamp.to_pydatetime(),
        ):
            recorded += 1

    logger.info(
        "Import complete. %d of %d rows recorded traffic", recorded, len(df)
    )
    return recorded
