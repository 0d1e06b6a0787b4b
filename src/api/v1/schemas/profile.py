"""Pydantic schemas for Profile API."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from domain.entities.profile import MAX_INTERESTS

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


def _check_username(v: str | None) -> str | None:
    if v is not None and not USERNAME_PATTERN.match(v):
        raise ValueError("Username may contain letters, digits and underscores only")
    return v


class ProfileFields(BaseModel):
    """Owner-editable profile fields."""

    username: str | None = Field(None, min_length=3, max_length=30)
    avatar_url: str | None = Field(None, max_length=500)
    campus_name: str = Field("", max_length=100)
    class_year: int | None = Field(None, ge=2020, le=2030)
    major: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)
    interests: list[str] = Field(default_factory=list, max_length=MAX_INTERESTS)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        return _check_username(v)

    @field_validator("interests")
    @classmethod
    def normalize_interests(cls, v: list[str]) -> list[str]:
        cleaned = [item.strip() for item in v if item.strip()]
        return list(dict.fromkeys(cleaned))


class ProfileCreate(ProfileFields):
    """Schema for creating the caller's profile."""

    full_name: str = Field(..., min_length=1, max_length=100)


class ProfileUpdate(BaseModel):
    """Schema for updating a profile (all fields optional)."""

    username: str | None = Field(None, min_length=3, max_length=30)
    full_name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = Field(None, max_length=500)
    campus_name: str | None = Field(None, max_length=100)
    class_year: int | None = Field(None, ge=2020, le=2030)
    major: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)
    interests: list[str] | None = Field(None, max_length=MAX_INTERESTS)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        return _check_username(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> "ProfileUpdate":
        for name in ("full_name", "campus_name", "interests"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str | None
    full_name: str
    avatar_url: str | None
    campus_name: str
    class_year: int | None
    major: str | None
    bio: str | None
    interests: list[str]
    rating_avg: float
    rating_count: int
    created_at: datetime
    updated_at: datetime


class PublicProfileResponse(BaseModel):
    """Profile as seen by other users (no email)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str | None
    full_name: str
    avatar_url: str | None
    campus_name: str
    class_year: int | None
    major: str | None
    bio: str | None
    interests: list[str]
    rating_avg: float
    rating_count: int


class ProfileDetailResponse(BaseModel):
    data: ProfileResponse


class PublicProfileDetailResponse(BaseModel):
    data: PublicProfileResponse
