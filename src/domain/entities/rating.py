"""Rating domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4


class QuickTag(str, Enum):
    """Preset tags a rater can attach to a score."""

    FUN_CREW = "fun_crew"
    CHILL = "chill"
    ORGANIZED = "organized"
    NO_SHOW = "no_show"
    HELPFUL = "helpful"
    FRIENDLY = "friendly"
    PUNCTUAL = "punctual"
    CREATIVE = "creative"


@dataclass
class Rating:
    """One-directional score from a rater to a ratee for a shared event."""

    event_id: UUID
    rater_id: UUID
    ratee_id: UUID
    stars: int
    id: UUID = field(default_factory=uuid4)
    quick_tags: list[QuickTag] = field(default_factory=list)
    comment: str | None = None
    is_anonymous: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
