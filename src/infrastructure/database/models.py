"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """User profile model (id mirrors the Supabase auth user)."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("rating_avg >= 0 AND rating_avg <= 5", name="ck_profiles_rating_avg"),
        CheckConstraint("rating_count >= 0", name="ck_profiles_rating_count"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(30), unique=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    campus_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    class_year: Mapped[int | None] = mapped_column(Integer)
    major: Mapped[str | None] = mapped_column(String(100))
    bio: Mapped[str | None] = mapped_column(Text)
    interests: Mapped[list[str]] = mapped_column(JSONB, default=list)
    rating_avg: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    hosted_events: Mapped[list["EventModel"]] = relationship(
        "EventModel",
        back_populates="host",
        cascade="all, delete-orphan",
    )


class EventModel(Base):
    """Event model.

    ``current_attendees`` is maintained only through guarded UPDATEs issued
    alongside attendee inserts/deletes; the CHECK constraint is the final
    authority on capacity.
    """

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "category IN ('study', 'sport', 'party', 'food', 'volunteer', 'social', "
            "'academic', 'fitness', 'music', 'tech', 'other')",
            name="ck_events_category",
        ),
        CheckConstraint(
            "status IN ('draft', 'active', 'cancelled', 'completed')",
            name="ck_events_status",
        ),
        CheckConstraint(
            "max_attendees >= 1 AND max_attendees <= 100",
            name="ck_events_max_attendees",
        ),
        CheckConstraint(
            "current_attendees >= 0 AND current_attendees <= max_attendees",
            name="ck_events_capacity",
        ),
        CheckConstraint("end_time > start_time", name="ck_events_time_window"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    host_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    location_text: Mapped[str] = mapped_column(String(200), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    max_attendees: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    current_attendees: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cover_url: Mapped[str | None] = mapped_column(String(500))
    tags: Mapped[list[str]] = mapped_column(JSONB, default=list)
    cost: Mapped[int | None] = mapped_column(Integer)
    auto_approve: Mapped[bool] = mapped_column(Boolean, default=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    host: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        back_populates="hosted_events",
    )
    attendees: Mapped[list["EventAttendeeModel"]] = relationship(
        "EventAttendeeModel",
        back_populates="event",
        cascade="all, delete-orphan",
    )


class EventAttendeeModel(Base):
    """Event membership model, unique per (event_id, user_id)."""

    __tablename__ = "event_attendees"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_attendees_event_user"),
        CheckConstraint(
            "status IN ('joined', 'requested', 'denied', 'waitlisted')",
            name="ck_event_attendees_status",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="joined")
    notes: Mapped[str | None] = mapped_column(String(200))
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    event: Mapped["EventModel"] = relationship(
        "EventModel",
        back_populates="attendees",
    )
    user: Mapped["ProfileModel"] = relationship("ProfileModel")


class CarpoolModel(Base):
    """Carpool ride offer model."""

    __tablename__ = "carpools"
    __table_args__ = (
        CheckConstraint("seats_total >= 1 AND seats_total <= 8", name="ck_carpools_seats_total"),
        CheckConstraint(
            "seats_available >= 0 AND seats_available <= seats_total",
            name="ck_carpools_seats_available",
        ),
        CheckConstraint(
            "status IN ('active', 'full', 'cancelled', 'completed')",
            name="ck_carpools_status",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    driver_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    origin_text: Mapped[str] = mapped_column(String(200), nullable=False)
    destination_text: Mapped[str] = mapped_column(String(200), nullable=False)
    depart_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    depart_window: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    seats_total: Mapped[int] = mapped_column(Integer, nullable=False)
    seats_available: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_per_person: Mapped[int | None] = mapped_column(Integer)
    meeting_spot: Mapped[str | None] = mapped_column(String(200))
    vehicle_info: Mapped[str | None] = mapped_column(String(200))
    safety_notes: Mapped[str | None] = mapped_column(String(500))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    event: Mapped["EventModel"] = relationship("EventModel")
    driver: Mapped["ProfileModel"] = relationship("ProfileModel")
    requests: Mapped[list["CarpoolRequestModel"]] = relationship(
        "CarpoolRequestModel",
        back_populates="carpool",
        cascade="all, delete-orphan",
    )


class CarpoolRequestModel(Base):
    """Seat request model, unique per (carpool_id, rider_id)."""

    __tablename__ = "carpool_requests"
    __table_args__ = (
        UniqueConstraint("carpool_id", "rider_id", name="uq_carpool_requests_carpool_rider"),
        CheckConstraint(
            "seats_requested >= 1 AND seats_requested <= 4",
            name="ck_carpool_requests_seats",
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'denied', 'cancelled')",
            name="ck_carpool_requests_status",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    carpool_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("carpools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rider_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    seats_requested: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    pickup_location: Mapped[str | None] = mapped_column(String(200))
    message: Mapped[str | None] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    carpool: Mapped["CarpoolModel"] = relationship(
        "CarpoolModel",
        back_populates="requests",
    )
    rider: Mapped["ProfileModel"] = relationship("ProfileModel")


class RatingModel(Base):
    """Rating model, one per (event, rater, ratee)."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("event_id", "rater_id", "ratee_id", name="uq_ratings_event_rater_ratee"),
        CheckConstraint("stars >= 1 AND stars <= 5", name="ck_ratings_stars"),
        CheckConstraint("rater_id <> ratee_id", name="ck_ratings_not_self"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    rater_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    ratee_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    quick_tags: Mapped[list[str]] = mapped_column(JSONB, default=list)
    comment: Mapped[str | None] = mapped_column(String(500))
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ThreadModel(Base):
    """Conversation model scoped to an event, a carpool or two users."""

    __tablename__ = "threads"
    __table_args__ = (
        CheckConstraint("type IN ('event', 'carpool', 'dm')", name="ck_threads_type"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    event_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        unique=True,
    )
    carpool_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("carpools.id", ondelete="CASCADE"),
        unique=True,
    )
    last_message_at: Mapped[datetime | None] = mapped_column(DateTime)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    participants: Mapped[list["ThreadParticipantModel"]] = relationship(
        "ThreadParticipantModel",
        back_populates="thread",
        cascade="all, delete-orphan",
    )


class ThreadParticipantModel(Base):
    """Thread participation model (composite PK on thread_id + user_id)."""

    __tablename__ = "thread_participants"

    thread_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("threads.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    thread: Mapped["ThreadModel"] = relationship(
        "ThreadModel",
        back_populates="participants",
    )


class MessageModel(Base):
    """Append-only chat message model."""

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "message_type IN ('text', 'image', 'location', 'rsvp_sticker', 'reaction')",
            name="ck_messages_type",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    thread_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        index=True,
    )
    sender_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_type: Mapped[str] = mapped_column(String(20), nullable=False, default="text")
    reply_to_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("messages.id", ondelete="SET NULL"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )

    # Relationships
    sender: Mapped["ProfileModel"] = relationship("ProfileModel")
    reply_to: Mapped[Optional["MessageModel"]] = relationship(
        "MessageModel",
        remote_side=[id],
    )
