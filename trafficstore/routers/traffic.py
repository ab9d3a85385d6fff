"""Traffic endpoints: recording deltas, pruning and raw series reads."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from trafficstore.config import settings
from trafficstore.database import get_db
from trafficstore.exceptions import InterfaceNotFoundError, PersistenceError
from trafficstore.schemas import (
    BucketEntry,
    ErrorResponse,
    PruneResponse,
    SeriesResponse,
    TrafficRecordRequest,
    TrafficRecordResponse,
)
from trafficstore.services.traffic import get_series, prune_old_entries, record_traffic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/traffic", tags=["Traffic"])


@router.post(
    "",
    response_model=TrafficRecordResponse,
    summary="Record a traffic delta",
    description=(
        "Adds the rx/tx delta to the interface's lifetime totals and to the "
        "matching bucket of every series in one transaction. Unknown "
        "interfaces are registered on first use. A zero delta is accepted "
        "and writes nothing."
    ),
    responses={
        500: {"model": ErrorResponse, "description": "Nothing was written"},
    },
)
def post_traffic(
    payload: TrafficRecordRequest, db: Session = Depends(get_db)
) -> TrafficRecordResponse:
    try:
        recorded = record_traffic(
            db, payload.interface, payload.rx, payload.tx, timestamp=payload.timestamp
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        logger.error("Recording traffic for %s failed: %s", payload.interface, e)
        raise HTTPException(status_code=500, detail=f"Traffic not recorded: {e}")
    return TrafficRecordResponse(interface=payload.interface, recorded=recorded)


@router.post(
    "/prune",
    response_model=PruneResponse,
    summary="Delete buckets past their retention horizon",
)
def prune(db: Session = Depends(get_db)) -> PruneResponse:
    """Run the retention policy once against the current time."""
    try:
        deleted = prune_old_entries(db)
    except PersistenceError as e:
        logger.error("Pruning failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Pruning failed: {e}")
    return PruneResponse(deleted=deleted)


@router.get(
    "/{name}/{resolution}",
    response_model=SeriesResponse,
    summary="Read one traffic series of an interface",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown resolution"},
        404: {"model": ErrorResponse, "description": "Interface not found"},
    },
)
def read_series(
    name: str,
    resolution: str,
    limit: int = Query(
        None,
        ge=1,
        le=settings.MAX_SERIES_LIMIT,
        description=(
            f"Maximum buckets to return (1-{settings.MAX_SERIES_LIMIT}, "
            f"default: {settings.DEFAULT_SERIES_LIMIT})"
        ),
    ),
    db: Session = Depends(get_db),
) -> SeriesResponse:
    """Return the newest buckets of the fiveminute, hour, day, month or year series."""
    if limit is None:
        limit = settings.DEFAULT_SERIES_LIMIT

    try:
        rows = get_series(db, name, resolution, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterfaceNotFoundError:
        raise HTTPException(status_code=404, detail=f"Interface '{name}' not found.")

    return SeriesResponse(
        interface=name,
        resolution=resolution,
        data=[BucketEntry.model_validate(row) for row in rows],
    )
