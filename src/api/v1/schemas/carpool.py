"""Pydantic schemas for Carpool API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import UTCDateTime
from domain.entities.carpool import CarpoolRequestStatus, CarpoolStatus


class CarpoolCreate(BaseModel):
    """Schema for offering a ride."""

    event_id: UUID
    origin_text: str = Field(..., min_length=1, max_length=200)
    destination_text: str = Field(..., min_length=1, max_length=200)
    depart_time: UTCDateTime
    depart_window: int = Field(15, ge=0, le=120, description="Minutes of slack")
    seats_total: int = Field(..., ge=1, le=8)
    cost_per_person: int | None = Field(None, ge=0, description="Cost in cents")
    meeting_spot: str | None = Field(None, max_length=200)
    vehicle_info: str | None = Field(None, max_length=200)
    safety_notes: str | None = Field(None, max_length=500)


class CarpoolResponse(BaseModel):
    """Schema for Carpool response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    driver_id: UUID
    origin_text: str
    destination_text: str
    depart_time: datetime
    depart_window: int
    seats_total: int
    seats_available: int
    cost_per_person: int | None
    meeting_spot: str | None
    vehicle_info: str | None
    safety_notes: str | None
    status: CarpoolStatus
    created_at: datetime
    updated_at: datetime


class CarpoolListResponse(BaseModel):
    data: list[CarpoolResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class CarpoolDetailResponse(BaseModel):
    data: CarpoolResponse


class SeatRequestCreate(BaseModel):
    """Schema for asking a driver for seats."""

    seats_requested: int = Field(1, ge=1, le=4)
    pickup_location: str | None = Field(None, max_length=200)
    message: str | None = Field(None, max_length=200)


class SeatRequestResponse(BaseModel):
    """Schema for a seat request."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    carpool_id: UUID
    rider_id: UUID
    seats_requested: int
    pickup_location: str | None
    message: str | None
    status: CarpoolRequestStatus
    created_at: datetime
    updated_at: datetime


class SeatRequestDetailResponse(BaseModel):
    data: SeatRequestResponse


class SeatRequestListResponse(BaseModel):
    data: list[SeatRequestResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
