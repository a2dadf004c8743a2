"""Friend list database model."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from adventure_api.infra.db.base import Base
from adventure_api.domain.adventure.models import Friend as FriendEntity


class FriendModel(Base):
    """One directed friendship: ``friend_user_id`` appears in ``user_id``'s list."""

    __tablename__ = "friends"
    __table_args__ = (UniqueConstraint("user_id", "friend_user_id", name="uq_friends_pair"),)

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    friend_user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    connected_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self) -> FriendEntity:
        return FriendEntity(
            id=self.friend_user_id,
            user_id=self.user_id,
            name=self.name,
            avatar_url=self.avatar_url,
        )
