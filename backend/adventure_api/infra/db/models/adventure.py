"""Adventure database models."""
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Integer,
    ForeignKey,
    Enum as SQLEnum,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from adventure_api.infra.db.base import Base
from adventure_api.infra.db.models.user import UserModel
from adventure_api.domain.adventure.models import (
    Adventure,
    AdventurePhoto,
    AdventureReaction,
    AdventureStatus,
    Participant,
    fallback_username,
)


class AdventureStatusEnum(str, enum.Enum):
    upcoming = "upcoming"
    completed = "completed"


class AdventureModel(Base):
    """Adventure row. Participants live in adventure_participants, ordered by position."""

    __tablename__ = "adventures"

    id = Column(String, primary_key=True)
    creator_id = Column(String, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(
        SQLEnum(AdventureStatusEnum, name="adventure_status"),
        nullable=False,
        default=AdventureStatusEnum.upcoming,
    )
    summary = Column(Text, nullable=True)
    share_token = Column(String, unique=True, nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    participants = relationship(
        "AdventureParticipantModel",
        order_by="AdventureParticipantModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_entity(self) -> Adventure:
        """Convert to domain entity."""
        return Adventure(
            id=self.id,
            creator_id=self.creator_id,
            title=self.title,
            description=self.description,
            status=AdventureStatus(self.status.value),
            summary=self.summary,
            share_token=self.share_token,
            participants=[p.to_participant() for p in self.participants],
            starts_at=self.starts_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: Adventure) -> "AdventureModel":
        """Create from domain entity (without participant rows)."""
        return cls(
            id=entity.id,
            creator_id=entity.creator_id,
            title=entity.title,
            description=entity.description,
            status=AdventureStatusEnum(entity.status.value),
            summary=entity.summary,
            share_token=entity.share_token,
            starts_at=entity.starts_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


def _as_participant(user_id: str, user: Optional[UserModel]) -> Participant:
    if user is None:
        return Participant(id=user_id, username=fallback_username(user_id))
    return Participant(id=user.id, username=user.username, avatar_url=user.avatar_url)


class AdventureParticipantModel(Base):
    """Membership row. Username and avatar are read from users at load time."""

    __tablename__ = "adventure_participants"
    __table_args__ = (UniqueConstraint("adventure_id", "user_id", name="uq_adventure_participant"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    adventure_id = Column(String, ForeignKey("adventures.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship(
        UserModel,
        primaryjoin="foreign(AdventureParticipantModel.user_id) == UserModel.id",
        lazy="selectin",
        viewonly=True,
    )

    def to_participant(self) -> Participant:
        return _as_participant(self.user_id, self.user)


class AdventurePhotoModel(Base):
    """Photo row; the uploader is resolved from users at load time."""

    __tablename__ = "adventure_photos"

    id = Column(String, primary_key=True)
    adventure_id = Column(String, ForeignKey("adventures.id", ondelete="CASCADE"), nullable=False, index=True)
    uploader_id = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    caption = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    uploader = relationship(
        UserModel,
        primaryjoin="foreign(AdventurePhotoModel.uploader_id) == UserModel.id",
        lazy="selectin",
        viewonly=True,
    )

    def to_entity(self) -> AdventurePhoto:
        return AdventurePhoto(
            id=self.id,
            adventure_id=self.adventure_id,
            url=self.url,
            uploader=_as_participant(self.uploader_id, self.uploader),
            caption=self.caption,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: AdventurePhoto) -> "AdventurePhotoModel":
        return cls(
            id=entity.id,
            adventure_id=entity.adventure_id,
            uploader_id=entity.uploader.id,
            url=entity.url,
            caption=entity.caption,
            created_at=entity.created_at,
        )


class AdventureReactionModel(Base):
    """One emoji per (adventure, user)."""

    __tablename__ = "adventure_reactions"
    __table_args__ = (UniqueConstraint("adventure_id", "user_id", name="uq_adventure_reaction_user"),)

    id = Column(String, primary_key=True)
    adventure_id = Column(String, ForeignKey("adventures.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    emoji = Column(String(32), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self) -> AdventureReaction:
        return AdventureReaction(
            id=self.id,
            adventure_id=self.adventure_id,
            user_id=self.user_id,
            emoji=self.emoji,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: AdventureReaction) -> "AdventureReactionModel":
        return cls(
            id=entity.id,
            adventure_id=entity.adventure_id,
            user_id=entity.user_id,
            emoji=entity.emoji,
            created_at=entity.created_at,
        )
