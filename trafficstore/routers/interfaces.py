"""Interface administration endpoints.

Provides endpoints for:
- Listing and counting registered interfaces
- Registering and removing interfaces
- Updating alias, active flag and stored raw counters
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from trafficstore.database import get_db
from trafficstore.exceptions import (
    InterfaceNotFoundError,
    InvariantViolationError,
    PersistenceError,
)
from trafficstore.schemas import (
    ActiveUpdate,
    AliasUpdate,
    Counters,
    ErrorResponse,
    InterfaceCreate,
    InterfaceListResponse,
    InterfaceResponse,
)
from trafficstore.services import registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/interfaces", tags=["Interfaces"])

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Interface not found"}}


def _not_found(exc: InterfaceNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Interface '{exc.name}' not found.")


def _storage_failure(exc: Exception) -> HTTPException:
    logger.error("Interface update failed: %s", exc)
    return HTTPException(status_code=500, detail=f"Storage error: {exc}")


@router.get(
    "",
    response_model=InterfaceListResponse,
    summary="List registered interfaces",
)
def list_interfaces(db: Session = Depends(get_db)) -> InterfaceListResponse:
    """List every registered interface with its lifetime totals."""
    interfaces = registry.list_interfaces(db)
    return InterfaceListResponse(
        count=registry.get_interface_count(db),
        data=[InterfaceResponse.model_validate(iface) for iface in interfaces],
    )


@router.post(
    "",
    response_model=InterfaceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an interface",
    description="Registers the interface if it is new; registering an existing name is a no-op.",
)
def register_interface(
    payload: InterfaceCreate, db: Session = Depends(get_db)
) -> InterfaceResponse:
    try:
        registry.register_interface(db, payload.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise _storage_failure(e)
    return InterfaceResponse.model_validate(registry.get_interface(db, payload.name))


@router.get(
    "/{name}",
    response_model=InterfaceResponse,
    summary="Get an interface",
    responses=NOT_FOUND_RESPONSE,
)
def get_interface(name: str, db: Session = Depends(get_db)) -> InterfaceResponse:
    try:
        interface = registry.get_interface(db, name)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    return InterfaceResponse.model_validate(interface)


@router.put(
    "/{name}/alias",
    response_model=InterfaceResponse,
    summary="Set the interface alias",
    responses=NOT_FOUND_RESPONSE,
)
def update_alias(
    name: str, payload: AliasUpdate, db: Session = Depends(get_db)
) -> InterfaceResponse:
    try:
        registry.set_alias(db, name, payload.alias)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    except PersistenceError as e:
        raise _storage_failure(e)
    return InterfaceResponse.model_validate(registry.get_interface(db, name))


@router.put(
    "/{name}/active",
    response_model=InterfaceResponse,
    summary="Enable or disable monitoring of an interface",
    responses=NOT_FOUND_RESPONSE,
)
def update_active(
    name: str, payload: ActiveUpdate, db: Session = Depends(get_db)
) -> InterfaceResponse:
    try:
        registry.set_active(db, name, payload.active)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    except PersistenceError as e:
        raise _storage_failure(e)
    return InterfaceResponse.model_validate(registry.get_interface(db, name))


@router.get(
    "/{name}/counters",
    response_model=Counters,
    summary="Get the stored raw counters",
    responses=NOT_FOUND_RESPONSE,
)
def read_counters(name: str, db: Session = Depends(get_db)) -> Counters:
    try:
        rxcounter, txcounter = registry.get_counters(db, name)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    except InvariantViolationError as e:
        raise _storage_failure(e)
    return Counters(rxcounter=rxcounter, txcounter=txcounter)


@router.put(
    "/{name}/counters",
    response_model=Counters,
    summary="Store the raw counters read by the sampler",
    responses=NOT_FOUND_RESPONSE,
)
def update_counters(
    name: str, payload: Counters, db: Session = Depends(get_db)
) -> Counters:
    try:
        registry.set_counters(db, name, payload.rxcounter, payload.txcounter)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    except PersistenceError as e:
        raise _storage_failure(e)
    return payload


@router.delete(
    "/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove an interface and all of its traffic history",
    responses=NOT_FOUND_RESPONSE,
)
def delete_interface(name: str, db: Session = Depends(get_db)) -> None:
    try:
        registry.remove_interface(db, name)
    except InterfaceNotFoundError as e:
        raise _not_found(e)
    except PersistenceError as e:
        raise _storage_failure(e)
