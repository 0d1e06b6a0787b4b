"""Pydantic schemas for thread and message API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.message import MAX_MESSAGE_LENGTH, MessageType, ThreadType


class MessageCreate(BaseModel):
    """Schema for sending a message. Content is trimmed before checks."""

    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    message_type: MessageType = MessageType.TEXT
    reply_to_id: UUID | None = None

    @field_validator("content", mode="before")
    @classmethod
    def trim_content(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class MessageViewResponse(BaseModel):
    """A message joined with its sender's display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    thread_id: UUID
    event_id: UUID | None
    sender_id: UUID
    sender_name: str
    sender_avatar_url: str | None
    content: str
    message_type: MessageType
    reply_to_id: UUID | None
    created_at: datetime


class MessageResponse(BaseModel):
    """A stored message."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    thread_id: UUID
    event_id: UUID | None
    sender_id: UUID
    content: str
    message_type: MessageType
    reply_to_id: UUID | None
    created_at: datetime


class MessageDetailResponse(BaseModel):
    data: MessageResponse


class MessageViewDetailResponse(BaseModel):
    data: MessageViewResponse


class MessageListResponse(BaseModel):
    data: list[MessageViewResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class DirectThreadCreate(BaseModel):
    user_id: UUID


class ThreadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: ThreadType
    event_id: UUID | None
    carpool_id: UUID | None
    last_message_at: datetime | None
    is_archived: bool
    created_at: datetime


class ThreadDetailResponse(BaseModel):
    data: ThreadResponse


class ThreadListResponse(BaseModel):
    data: list[ThreadResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
