"""Adventure domain models."""
import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from adventure_api.domain.common.types import generate_id, to_naive_utc, utcnow


class AdventureStatus(str, enum.Enum):
    """Adventure status. UPCOMING -> COMPLETED is the only transition."""
    UPCOMING = "upcoming"
    COMPLETED = "completed"


class Participant(BaseModel):
    """A user as seen from inside an adventure."""

    id: str
    username: str
    avatar_url: Optional[str] = None


class Adventure(BaseModel):
    """Adventure domain model."""

    id: str
    creator_id: str
    title: str
    description: str
    status: AdventureStatus = AdventureStatus.UPCOMING
    summary: Optional[str] = None
    share_token: str
    participants: list[Participant] = Field(default_factory=list)
    starts_at: datetime
    created_at: datetime
    updated_at: datetime

    @field_validator("starts_at", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    def has_participant(self, user_id: str) -> bool:
        return any(p.id == user_id for p in self.participants)

    @classmethod
    def create(
        cls,
        creator: Participant,
        title: str,
        description: str,
        share_token: str,
        participants: list[Participant],
        starts_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> "Adventure":
        """Create a new upcoming adventure."""
        now = now or utcnow()
        return cls(
            id=generate_id(),
            creator_id=creator.id,
            title=title,
            description=description,
            status=AdventureStatus.UPCOMING,
            share_token=share_token,
            participants=participants,
            starts_at=starts_at or now,
            created_at=now,
            updated_at=now,
        )


class AdventurePhoto(BaseModel):
    """Photo attached to an adventure."""

    id: str
    adventure_id: str
    url: str
    uploader: Participant
    caption: Optional[str] = None
    created_at: datetime


class AdventureReaction(BaseModel):
    """Emoji reaction; at most one per (adventure, user)."""

    id: str
    adventure_id: str
    user_id: str
    emoji: str
    created_at: datetime


class AdventureWithMedia(Adventure):
    """Adventure plus its photos and reactions, as rendered in lists."""

    photos: list[AdventurePhoto] = Field(default_factory=list)
    reactions: list[AdventureReaction] = Field(default_factory=list)


class AdventureCreate(BaseModel):
    """Input for creating an adventure."""

    title: str
    starts_at: Optional[datetime] = None
    friend_ids: list[str] = Field(default_factory=list)

    @field_validator("starts_at")
    @classmethod
    def normalize_starts_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class AdventureUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[AdventureStatus] = None
    summary: Optional[str] = None
    starts_at: Optional[datetime] = None

    @field_validator("starts_at")
    @classmethod
    def normalize_starts_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class ShareLink(BaseModel):
    token: str
    url: str


class User(BaseModel):
    """User as exposed by the user directory."""

    id: str
    username: str
    avatar_url: Optional[str] = None


class Friend(BaseModel):
    """Entry of a user's friend list. ``id`` is the friend's user id."""

    id: str
    user_id: str
    name: str
    avatar_url: Optional[str] = None


def fallback_username(user_id: str) -> str:
    return f"user-{user_id[:6]}"


class SignedPutUrl(BaseModel):
    """Time-limited upload URL and the public URL the object will have."""

    upload_url: str
    photo_url: str
    expires_in: int
    key: str


class SignedGetUrl(BaseModel):
    url: str
    expires_in: int
    key: str
