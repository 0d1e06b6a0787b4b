"""Pydantic schemas for Event and attendee API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from api.v1.schemas.common import UTCDateTime
from domain.entities.event import AttendeeStatus, EventCategory, EventStatus

MAX_TAGS = 10


class EventCreate(BaseModel):
    """Schema for creating an Event."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    category: EventCategory
    location_text: str = Field(..., min_length=1, max_length=200)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    start_time: UTCDateTime
    end_time: UTCDateTime
    max_attendees: int = Field(20, ge=1, le=100)
    cover_url: str | None = Field(None, max_length=500)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    cost: int | None = Field(None, ge=0, description="Cost in cents")
    auto_approve: bool = True
    is_public: bool = True
    status: EventStatus = EventStatus.ACTIVE

    @model_validator(mode="after")
    def check_time_window(self) -> "EventCreate":
        if self.status not in (EventStatus.DRAFT, EventStatus.ACTIVE):
            raise ValueError("New events start as draft or active")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventUpdate(BaseModel):
    """Schema for updating an Event (all fields optional)."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    category: EventCategory | None = None
    location_text: str | None = Field(None, min_length=1, max_length=200)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    start_time: UTCDateTime | None = None
    end_time: UTCDateTime | None = None
    max_attendees: int | None = Field(None, ge=1, le=100)
    cover_url: str | None = Field(None, max_length=500)
    tags: list[str] | None = Field(None, max_length=MAX_TAGS)
    cost: int | None = Field(None, ge=0)
    auto_approve: bool | None = None
    is_public: bool | None = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "EventUpdate":
        required = (
            "title",
            "category",
            "location_text",
            "start_time",
            "end_time",
            "max_attendees",
            "tags",
            "auto_approve",
            "is_public",
        )
        for name in required:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventResponse(BaseModel):
    """Schema for Event response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "host_id": "9b2d5f0e-1c3a-4e8b-8f1a-2d3c4b5a6f70",
                "title": "Sunset frisbee on the quad",
                "category": "sport",
                "location_text": "Main Quad",
                "start_time": "2026-05-02T18:00:00",
                "end_time": "2026-05-02T20:00:00",
                "max_attendees": 12,
                "current_attendees": 4,
                "status": "active",
            }
        },
    )

    id: UUID
    host_id: UUID
    title: str
    description: str | None
    category: EventCategory
    location_text: str
    latitude: float | None
    longitude: float | None
    start_time: datetime
    end_time: datetime
    max_attendees: int
    current_attendees: int
    cover_url: str | None
    tags: list[str]
    cost: int | None
    auto_approve: bool
    is_public: bool
    status: EventStatus
    created_at: datetime
    updated_at: datetime


class EventListResponse(BaseModel):
    """Schema for list of Events response."""

    data: list[EventResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class EventDetailResponse(BaseModel):
    """Schema for single Event response."""

    data: EventResponse


class JoinEventRequest(BaseModel):
    """Optional note to the host when joining."""

    notes: str | None = Field(None, max_length=200)


class AttendeeProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    avatar_url: str | None


class AttendeeResponse(BaseModel):
    """Schema for an event membership row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    user_id: UUID
    status: AttendeeStatus
    notes: str | None
    joined_at: datetime
    profile: AttendeeProfile | None = None


class AttendeeDetailResponse(BaseModel):
    data: AttendeeResponse


class AttendeeListResponse(BaseModel):
    data: list[AttendeeResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
