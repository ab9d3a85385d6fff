"""Bucket key resolution for the five traffic resolutions.

Every traffic series stores one row per bucket, keyed by the bucket's start
time in local time. This module owns the rounding rules that map an instant
to that start time, and the retention horizon of each series. Each
resolution is computed directly from the input instant; none is derived from
another resolution's bucket.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Union

import pandas as pd

from trafficstore.models import Day, FiveMinute, Hour, Month, Year

TimestampLike = Union[datetime, int, float, None]


def to_local_datetime(timestamp: TimestampLike = None) -> datetime:
    """Normalize a timestamp to a naive local datetime at whole seconds.

    Args:
        timestamp: None for the current instant, Unix epoch seconds, or a
            datetime. Aware datetimes are converted to local time; naive
            datetimes are taken to already be local.

    Returns:
        A naive datetime in local time with microseconds dropped.
    """
    if timestamp is None:
        local = datetime.now()
    elif isinstance(timestamp, datetime):
        local = timestamp
        if timestamp.tzinfo is not None:
            local = timestamp.astimezone().replace(tzinfo=None)
    elif isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        local = datetime.fromtimestamp(timestamp)
    else:
        raise TypeError(
            f"Unsupported timestamp type: {type(timestamp).__name__}"
        )
    return local.replace(microsecond=0)


def _floor_fiveminute(ts: datetime) -> datetime:
    return ts.replace(minute=ts.minute - ts.minute % 5, second=0, microsecond=0)


def _floor_hour(ts: datetime) -> datetime:
    return ts.replace(minute=0, second=0, microsecond=0)


def _floor_day(ts: datetime) -> datetime:
    return datetime(ts.year, ts.month, ts.day)


def _floor_month(ts: datetime) -> datetime:
    return datetime(ts.year, ts.month, 1)


def _floor_year(ts: datetime) -> datetime:
    return datetime(ts.year, 1, 1)


@dataclass(frozen=True)
class Resolution:
    """One traffic series: its table, rounding rule and retention horizon.

    Attributes:
        name: Series name, also the table name.
        model: ORM model of the series table.
        floor: Maps a local datetime to the start of its bucket.
        retention: How far back from "now" buckets are kept.
        date_cutoff: Truncate the retention cutoff to midnight. Used by the
            calendar series, whose bucket keys carry no time of day.
    """

    name: str
    model: type
    floor: Callable[[datetime], datetime]
    retention: pd.DateOffset
    date_cutoff: bool = False

    def bucket_start(self, timestamp: TimestampLike = None) -> datetime:
        return self.floor(to_local_datetime(timestamp))

    def retention_cutoff(self, now: TimestampLike = None) -> datetime:
        """Oldest bucket start that survives pruning at ``now``."""
        cutoff = (pd.Timestamp(to_local_datetime(now)) - self.retention).to_pydatetime()
        if self.date_cutoff:
            cutoff = datetime(cutoff.year, cutoff.month, cutoff.day)
        return cutoff


RESOLUTIONS = (
    Resolution("fiveminute", FiveMinute, _floor_fiveminute, pd.DateOffset(hours=48)),
    Resolution("hour", Hour, _floor_hour, pd.DateOffset(days=7)),
    Resolution("day", Day, _floor_day, pd.DateOffset(days=30), date_cutoff=True),
    Resolution("month", Month, _floor_month, pd.DateOffset(months=12), date_cutoff=True),
    Resolution("year", Year, _floor_year, pd.DateOffset(years=10), date_cutoff=True),
)

RESOLUTIONS_BY_NAME = {resolution.name: resolution for resolution in RESOLUTIONS}


def get_resolution(name: str) -> Resolution:
    """Look up a resolution by name.

    Raises:
        ValueError: If the name is not one of the five series.
    """
    try:
        return RESOLUTIONS_BY_NAME[name]
    except KeyError:
        raise ValueError(
            f"Unknown resolution '{name}': expected one of "
            f"{', '.join(RESOLUTIONS_BY_NAME)}"
        )


def bucket_start(
    timestamp: TimestampLike, resolution: Union[str, Resolution]
) -> datetime:
    """Return the start of the bucket containing ``timestamp``.

    Args:
        timestamp: Instant to resolve; see to_local_datetime for the
            accepted forms. None resolves the current instant.
        resolution: A Resolution or its name.

    Returns:
        The naive local bucket start time.
    """
    if isinstance(resolution, str):
        resolution = get_resolution(resolution)
    return resolution.bucket_start(timestamp)

