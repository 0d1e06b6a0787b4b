"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

MAX_INTERESTS = 10


@dataclass
class Profile:
    """Domain entity for a campus user profile (id mirrors the auth user)."""

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    full_name: str = ""
    username: str | None = None
    avatar_url: str | None = None
    campus_name: str = ""
    class_year: int | None = None
    major: str | None = None
    bio: str | None = None
    interests: list[str] = field(default_factory=list)
    rating_avg: float = 0.0
    rating_count: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass(frozen=True, slots=True)
class ProfileSummary:
    """Read-only value object: display attributes joined onto other rows."""

    id: UUID
    full_name: str
    avatar_url: str | None = None
