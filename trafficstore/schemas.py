"""Pydantic schemas for API request validation and response serialization."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from trafficstore.models import BIGINT_MAX


class InterfaceResponse(BaseModel):
    """A registered network interface and its lifetime totals."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Stable interface id")
    name: str = Field(..., description="Interface name")
    alias: Optional[str] = Field(None, description="Display label")
    active: bool = Field(..., description="Whether the interface is monitored")
    created: datetime = Field(..., description="Registration time (local)")
    updated: datetime = Field(..., description="Last traffic write (local)")
    rxtotal: int = Field(..., description="Lifetime received bytes")
    txtotal: int = Field(..., description="Lifetime transmitted bytes")


class InterfaceListResponse(BaseModel):
    """All registered interfaces."""

    count: int = Field(..., description="Number of registered interfaces")
    data: List[InterfaceResponse] = Field(..., description="Interfaces ordered by name")


class InterfaceCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Interface name")


class AliasUpdate(BaseModel):
    alias: Optional[str] = Field(None, description="New display label, null to clear")


class ActiveUpdate(BaseModel):
    active: bool = Field(..., description="Whether the interface is monitored")


class Counters(BaseModel):
    """Last raw counter values observed by the sampler."""

    rxcounter: int = Field(..., ge=0, le=BIGINT_MAX, description="Raw receive counter")
    txcounter: int = Field(..., ge=0, le=BIGINT_MAX, description="Raw transmit counter")


class TrafficRecordRequest(BaseModel):
    """A traffic delta for one interface."""

    interface: str = Field(..., min_length=1, description="Interface name")
    rx: int = Field(..., ge=0, le=BIGINT_MAX, description="Received bytes since the last sample")
    tx: int = Field(..., ge=0, le=BIGINT_MAX, description="Transmitted bytes since the last sample")
    timestamp: Optional[datetime] = Field(
        None, description="When the traffic was observed; defaults to now"
    )


class TrafficRecordResponse(BaseModel):
    interface: str = Field(..., description="Interface name")
    recorded: bool = Field(
        ..., description="False when both deltas were zero and nothing was written"
    )


class BucketEntry(BaseModel):
    """Traffic accumulated in one bucket."""

    model_config = ConfigDict(from_attributes=True)

    date: datetime = Field(..., description="Bucket start time (local)")
    rx: int = Field(..., description="Received bytes in the bucket")
    tx: int = Field(..., description="Transmitted bytes in the bucket")


class SeriesResponse(BaseModel):
    """Raw bucket rows of one series for one interface."""

    interface: str = Field(..., description="Interface name")
    resolution: str = Field(..., description="Series resolution")
    data: List[BucketEntry] = Field(..., description="Buckets, newest first")


class PruneResponse(BaseModel):
    deleted: Dict[str, int] = Field(..., description="Deleted rows per resolution")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(..., description="Error message")
