"""User database model."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime

from adventure_api.infra.db.base import Base
from adventure_api.domain.adventure.models import User as UserEntity


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_entity(self) -> UserEntity:
        """Convert to domain entity."""
        return UserEntity(id=self.id, username=self.username, avatar_url=self.avatar_url)

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserModel":
        """Create from domain entity."""
        return cls(id=entity.id, username=entity.username, avatar_url=entity.avatar_url)
