"""Pydantic schemas for Rating API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.rating import QuickTag


class RatingCreate(BaseModel):
    """Schema for rating someone after a shared event."""

    event_id: UUID
    ratee_id: UUID
    stars: int = Field(..., ge=1, le=5)
    quick_tags: list[QuickTag] = Field(default_factory=list, max_length=len(QuickTag))
    comment: str | None = Field(None, max_length=500)
    is_anonymous: bool = False

    @field_validator("quick_tags")
    @classmethod
    def dedupe_tags(cls, v: list[QuickTag]) -> list[QuickTag]:
        return list(dict.fromkeys(v))


class RatingResponse(BaseModel):
    """Schema for Rating response. ``rater_id`` is hidden for anonymous ratings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    rater_id: UUID | None
    ratee_id: UUID
    stars: int
    quick_tags: list[QuickTag]
    comment: str | None
    is_anonymous: bool
    created_at: datetime


class RatingDetailResponse(BaseModel):
    data: RatingResponse


class RatingListResponse(BaseModel):
    data: list[RatingResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
